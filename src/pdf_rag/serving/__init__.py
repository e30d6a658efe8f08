"""
Serving — FastAPI application for store management and question answering.
"""
