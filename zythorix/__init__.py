"""
Zythorix360 backend: study material catalogue, Razorpay payments and the
influencer referral program.
"""

__version__ = "1.0.0"
