"""Library catalogue API: books, borrowing and a JSON-file store."""
