"""Book catalog with filtered queries and XML export."""
