"""
ACV Mix Service

Serves quarter-by-category won-deal aggregates for the pipeline dashboard:
- Customer type, industry, ACV range and team datasets
- Summed count and ACV per fiscal quarter and category
- Each group's share of the dataset's total ACV
"""

__version__ = "1.0.0"
__author__ = "ACV Mix"
