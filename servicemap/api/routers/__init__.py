# Route modules grouped by area: health, auth, services, favorites.
