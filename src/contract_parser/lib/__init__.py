"""Parsing core: segmentation, classification, extraction and assembly."""
