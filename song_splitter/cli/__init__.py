"""
Command-line interface: the Typer application, Rich progress display and
console formatters.
"""
