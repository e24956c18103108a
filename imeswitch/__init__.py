"""imeswitch: switches the input method to match the text around the cursor."""

__version__ = "0.1.0"
