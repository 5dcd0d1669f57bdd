# Pydantic request and response contracts for the versioned API.
