"""
Civic engagement platform: survey results, petitions and the WhatsApp assistant.
"""

__version__ = "0.1.0"
