"""Business license OCR verification.

Recognizes photographed business-registration certificates with Tesseract,
extracts the registered fields with rule tables, and compares them against
the system-of-record values to produce an accuracy score and reviewer advice.
"""
