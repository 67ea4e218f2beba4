# src/ocr/__init__.py — v1
