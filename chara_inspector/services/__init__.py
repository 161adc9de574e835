"""Services for card extraction and remote image fetching."""
