"""Browser automation for page capture (Playwright).

``capture`` owns one browser session per inspection. The browser itself is
reached only through the ``driver`` capability interfaces, with
``playwright_driver`` as the production implementation.
"""
