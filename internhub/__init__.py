"""
InternHub
An internship marketplace for students and recruiters in India.

Architecture:
- PostgreSQL: Structured data (users, profiles, internships, applications)
- MongoDB GridFS: Resume files
- Apify: Third-party internship listings pulled into the catalog
"""

__version__ = "1.0.0"
