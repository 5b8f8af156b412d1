#!/usr/bin/env python3
"""
Shared constants for the diary importer

Single source of truth for column aliases, setting choices and document markers.
DO NOT duplicate these lists in other modules - import from here instead.
"""

# Column aliases, checked in order. First non-empty value wins.
# Letterboxd diary exports use 'Name' and 'Watched Date'; other exports vary.
TITLE_COLUMNS = ('Name', 'name', 'Title', 'title', 'Film', 'film', 'Movie', 'movie')
YEAR_COLUMNS = ('Year', 'year')
WATCHED_DATE_COLUMNS = ('Watched Date', 'Date', 'date')
RATING_COLUMNS = ('Rating',)
REVIEW_COLUMNS = ('Review',)
CONTENT_COLUMN = 'content'

# TMDb
TMDB_SEARCH_URL = 'https://api.themoviedb.org/3/search/movie'
TMDB_IMAGE_BASE_URL = 'https://image.tmdb.org/t/p'
TMDB_TIMEOUT_SECONDS = 10

# Poster sizes offered by the TMDb image CDN
IMAGE_SIZES = ('w92', 'w154', 'w185', 'w342', 'w500', 'original')
DEFAULT_IMAGE_SIZE = 'w185'

# Duplicate handling policies
POLICY_APPEND = 'append'
POLICY_UPDATE = 'update'
POLICY_SKIP = 'skip'
DUPLICATE_POLICIES = (POLICY_APPEND, POLICY_UPDATE, POLICY_SKIP)

DEFAULT_OUTPUT_FOLDER = 'Movies'

# Document structure
FRONTMATTER_DELIMITER = '---'
WATCH_HISTORY_HEADING = '## Watch History'
ENTRY_HEADING_PREFIX = '### '

# Front-matter keys owned by the importer (written after the row columns)
POSTER_KEY = 'poster'
WATCHES_KEY = 'watches'
TAGS_KEY = 'tags'

# Characters not allowed in note filenames
FORBIDDEN_FILENAME_CHARS = '\\/*?:"<>|'

# Emit a progress signal every N created+updated documents
PROGRESS_EVERY = 10
