"""
Test suite for Star Cleaning CRM.

Run all tests: pytest
Run with coverage: pytest --cov=. --cov-report=html
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_lead_import_service.py -v
"""
