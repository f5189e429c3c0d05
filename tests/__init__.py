"""Test suite for docqa.

Run tests:
    pytest tests/ -v
    pytest tests/test_retriever.py -v
"""
