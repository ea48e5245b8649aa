"""Review platform clients (Google Places, Yelp, TripAdvisor)."""
