"""Document ingestion service.

Receives uploaded document images and PDFs, extracts their text with
Google Document AI, and maps the text into structured records using
per-document-type field mapping models.
"""

__version__ = "1.0.0"
