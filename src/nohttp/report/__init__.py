"""Report rendering (console, Checkstyle XML, HTML) and exit status."""
