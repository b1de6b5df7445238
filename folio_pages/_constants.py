"""Common literal values used across folio_pages.

These constants keep output filenames and route prefixes centralized so the
publisher, templates, and tests can import the same values without drifting.
Intended for internal use within the folio_pages package.

Examples
--------
>>> from folio_pages import _constants
>>> _constants.INDEX_FILENAME
'index.html'
>>> _constants.STAGING_TEMPLATE.format(name="build").startswith(".build")
True
"""

INDEX_FILENAME = "index.html"
ROBOTS_FILENAME = "robots.txt"
SITEMAP_FILENAME = "sitemap.xml"
DEFAULT_FEED_FILENAME = "feed.rss"
DEFAULT_TAG_ROUTE = "/tags"
CONTENT_SUFFIX = ".md"
STAGING_TEMPLATE = ".{name}-staging-"
PREVIOUS_TEMPLATE = ".{name}-previous"
WORDS_PER_MINUTE = 200
