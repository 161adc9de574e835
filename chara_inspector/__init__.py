"""
Chara Inspector - Character Card Extraction Service

Reads SillyTavern character cards (V2 'chara' and V3 'ccv3') embedded in PNG
images and serves them over a small FastAPI application.
"""

__version__ = "0.1.0"
