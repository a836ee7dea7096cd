"""Legacy childcare data import application package."""
