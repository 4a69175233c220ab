"""Recipe discovery, local storage and a derived shopping list."""
