"""Static site content served alongside the map and chat."""
from dataclasses import dataclass
from typing import List

SITE_TITLE = "Wheelchair Guidance Hub"
SITE_DESCRIPTION = "Information, resources, and support for wheelchair users."


@dataclass(frozen=True)
class NavSection:
    slug: str
    label: str
    path: str


NAV_SECTIONS: List[NavSection] = [
    NavSection(slug="home", label="Home", path="/"),
    NavSection(slug="about", label="About", path="/about"),
    NavSection(slug="info", label="Wheelchair Info", path="/info"),
    NavSection(slug="chatbot", label="Chatbot", path="/chatbot"),
    NavSection(slug="resources", label="Resources", path="/resources"),
    NavSection(slug="map", label="Accessible Map", path="/map"),
]

HOME_HEADING = "Welcome to the Wheelchair Guidance Hub"
HOME_PARAGRAPHS: List[str] = [
    "Your central resource for information, support, and guidance related to wheelchairs. "
    "Navigate through our sections to find details on different wheelchair types, maintenance tips, "
    "ask questions to our helpful chatbot, or download useful resources.",
    "We aim to provide comprehensive assistance to wheelchair users, caregivers, and anyone seeking "
    "information about mobility solutions.",
]
