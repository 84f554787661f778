"""HTML Shelf: upload, catalog and preview HTML documents and bundles."""
