"""
Donor Portal API

Backend for the donor and membership portal. Proxies the browser front end
to Salesforce (contacts, households, donations) and Stripe (payment intents).
"""

__version__ = "1.0.0"
