"""Pure helpers shared by the backend paths."""
