"""
Canonical job sectors and which sectors count as "related" for matching.
"""
from typing import Dict, List

SECTOR_RELATIONSHIPS: Dict[str, List[str]] = {
    "Information Technology & Software": ["Data & Analytics", "Product Management & Operations", "Telecommunications"],
    "Engineering & Manufacturing": ["Construction & Real Estate", "Energy & Utilities (Oil, Gas, Renewable Energy)", "Telecommunications"],
    "Finance & Banking": ["Sales & Marketing", "Retail & E-commerce", "Legal & Compliance"],
    "Healthcare & Medical": ["Science & Research", "Education & Training"],
    "Education & Training": ["Healthcare & Medical", "Science & Research", "Nonprofit & NGO"],
    "Sales & Marketing": ["Finance & Banking", "Media, Advertising & Communications", "Retail & E-commerce", "Product Management & Operations"],
    "Human Resources & Recruitment": ["Customer Service & Support", "Sales & Marketing"],
    "Customer Service & Support": ["Retail & E-commerce", "Hospitality & Tourism", "Human Resources & Recruitment"],
    "Media, Advertising & Communications": ["Design, Arts & Creative", "Sales & Marketing"],
    "Design, Arts & Creative": ["Media, Advertising & Communications", "Information Technology & Software"],
    "Construction & Real Estate": ["Engineering & Manufacturing", "Logistics, Transport & Supply Chain"],
    "Logistics, Transport & Supply Chain": ["Retail & E-commerce", "Construction & Real Estate", "Agriculture & Agribusiness"],
    "Agriculture & Agribusiness": ["Logistics, Transport & Supply Chain", "Environment & Sustainability", "Science & Research"],
    "Energy & Utilities (Oil, Gas, Renewable Energy)": ["Engineering & Manufacturing", "Environment & Sustainability", "Science & Research"],
    "Legal & Compliance": ["Government & Public Administration", "Finance & Banking", "Security & Defense"],
    "Government & Public Administration": ["Legal & Compliance", "Security & Defense", "Nonprofit & NGO"],
    "Retail & E-commerce": ["Finance & Banking", "Sales & Marketing", "Logistics, Transport & Supply Chain", "Customer Service & Support"],
    "Hospitality & Tourism": ["Customer Service & Support", "Retail & E-commerce"],
    "Science & Research": ["Healthcare & Medical", "Education & Training", "Energy & Utilities (Oil, Gas, Renewable Energy)", "Environment & Sustainability", "Data & Analytics"],
    "Security & Defense": ["Government & Public Administration", "Legal & Compliance", "Information Technology & Software"],
    "Telecommunications": ["Information Technology & Software", "Engineering & Manufacturing"],
    "Nonprofit & NGO": ["Government & Public Administration", "Education & Training", "Environment & Sustainability"],
    "Environment & Sustainability": ["Agriculture & Agribusiness", "Energy & Utilities (Oil, Gas, Renewable Energy)", "Science & Research", "Nonprofit & NGO"],
    "Product Management & Operations": ["Information Technology & Software", "Data & Analytics", "Sales & Marketing"],
    "Data & Analytics": ["Information Technology & Software", "Product Management & Operations", "Science & Research"],
}

SECTORS: List[str] = list(SECTOR_RELATIONSHIPS)


def are_sectors_related(first: str, second: str) -> bool:
    """Related in either direction; compares the original (unnormalized) names."""
    if not first or not second:
        return False
    if second in SECTOR_RELATIONSHIPS.get(first, []):
        return True
    return first in SECTOR_RELATIONSHIPS.get(second, [])
