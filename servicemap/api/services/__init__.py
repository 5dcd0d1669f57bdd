# Data access and domain services behind the routers.
