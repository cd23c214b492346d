"""
crmdml
~~~~~~

Data-manipulation exercises against Salesforce-style CRM records.
"""
