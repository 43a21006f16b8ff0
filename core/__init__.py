"""
CORE App - Admin accounts, authentication, audit trail and company settings
"""
