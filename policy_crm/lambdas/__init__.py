"""AWS Lambda entry points.

Files:
  pdf_processor.py  — S3 ObjectCreated → Textract → internal API callback
"""
