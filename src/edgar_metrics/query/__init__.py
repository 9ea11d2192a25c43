"""Read-side helpers: dataset filtering and the quarter axis."""
