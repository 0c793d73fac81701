"""Host adapters for embedding the prose engine in UIs."""
