"""
Internship records and the catalog filter criteria.
"""

from datetime import date
from typing import Optional, List
from pydantic import BaseModel, Field

from internhub.core import clock

INDIA = "India"

# Sentinel used by category/city pickers for "no constraint"
ALL = "All"

SUGGESTED_CATEGORIES = [
    "Software Development",
    "Data Science",
    "Marketing",
    "Finance",
    "Design",
    "Human Resources",
    "Engineering",
    "Content Writing",
    "Business Development",
    "Operations",
]

SUGGESTED_CITIES = [
    "Bangalore", "Mumbai", "Delhi", "Chennai", "Hyderabad", "Pune", "Kolkata",
    "Ahmedabad", "Jaipur", "Chandigarh", "Lucknow", "Kochi", "Indore",
    "Coimbatore", "Gurgaon", "Noida",
]


class Location(BaseModel):
    city: str
    state: str = ""
    country: str = INDIA


class Internship(BaseModel):
    id: str
    title: str
    company: str
    company_logo: Optional[str] = None
    category: str
    description: str
    responsibilities: List[str] = []
    requirements: List[str] = []
    location: Location
    stipend: int = Field(0, ge=0)
    duration_months: int = Field(..., gt=0)
    posted_date: date
    deadline: date
    is_remote: bool = False
    skills: List[str] = []
    slots: int = Field(1, gt=0)
    applications_count: int = Field(0, ge=0)
    recruiter_id: Optional[str] = None
    external_id: Optional[str] = None
    external_url: Optional[str] = None

    def days_left(self, today: Optional[date] = None) -> int:
        """Whole days until the deadline. Zero or negative means closed."""
        today = today or clock.today()
        return (self.deadline - today).days

    def is_open(self, today: Optional[date] = None) -> bool:
        return self.days_left(today) > 0


class InternshipFilter(BaseModel):
    """Catalog filter. Every field is optional; None means no constraint."""
    query: Optional[str] = None
    category: Optional[str] = None
    city: Optional[str] = None
    duration: Optional[int] = Field(None, gt=0, description="Maximum duration in months")
    stipend_min: Optional[int] = Field(None, ge=0)
    stipend_max: Optional[int] = Field(None, ge=0)
    is_remote: Optional[bool] = None
