"""Host adapters driving the engine from a UI toolkit."""
