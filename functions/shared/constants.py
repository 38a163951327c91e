"""
Limits, table names and storage prefixes shared by the API and the reader.
"""

BLOG_POSTS_TABLE = "blog_posts"
BLOG_IMAGES_TABLE = "blog_images"
PDF_LIBRARY_TABLE = "pdf_library"
USER_PDF_PROGRESS_TABLE = "user_pdf_progress"
PDF_NOTES_TABLE = "pdf_notes"
QUICK_REF_TABLE = "quick_ref"

ALL_TABLES = (
    BLOG_POSTS_TABLE,
    BLOG_IMAGES_TABLE,
    PDF_LIBRARY_TABLE,
    USER_PDF_PROGRESS_TABLE,
    PDF_NOTES_TABLE,
    QUICK_REF_TABLE,
)

MAX_NOTE_LENGTH = 5000
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000
MAX_SLUG_LENGTH = 200

MAX_PDF_SIZE_BYTES = 50 * 1024 * 1024
MAX_IMAGE_SIZE_BYTES = 5 * 1024 * 1024
PDF_CONTENT_TYPE = "application/pdf"

LIBRARY_PREFIX = "library"
BLOG_IMAGES_PREFIX = "blog-posts"

SIGNED_URL_EXPIRES_SECONDS = 3600
PROGRESS_DEBOUNCE_SECONDS = 3.0
