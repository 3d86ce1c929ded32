"""Output of `python -m generator`. Nothing here is edited by hand."""
