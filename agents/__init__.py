"""Content-service adapters: evaluator, question generator and their fallbacks."""
