"""
HTML cleaning service.
Converts HTML to visible text and counts navigation links for the extractor.
"""

from bs4 import BeautifulSoup
from typing import Union
import re


class HTMLCleaner:
    """Service for turning raw HTML into text the classifiers can search."""

    REMOVED_TAGS = ["script", "style", "noscript", "template", "svg"]

    def parse(self, html_content: str) -> BeautifulSoup:
        return BeautifulSoup(html_content or "", "html.parser")

    def visible_text(self, html_or_soup: Union[str, BeautifulSoup]) -> str:
        """
        Extract readable text from the page body.

        Args:
            html_or_soup: Raw HTML string or an already parsed document

        Returns:
            Whitespace-normalized visible text (empty string for empty input)
        """
        if isinstance(html_or_soup, BeautifulSoup):
            # Work on a copy so callers keep their script tags
            soup = BeautifulSoup(str(html_or_soup), "html.parser")
        else:
            if not html_or_soup or not html_or_soup.strip():
                return ""
            soup = self.parse(html_or_soup)

        root = soup.body or soup

        for element in root(self.REMOVED_TAGS):
            element.extract()

        text = root.get_text(separator=" ")

        # Collapse whitespace
        return re.sub(r"\s+", " ", text).strip()

    def count_nav_links(self, soup: BeautifulSoup) -> int:
        """Number of links inside <nav> and <header> elements."""
        return len(soup.select("nav a, header a"))


# Singleton instance
html_cleaner = HTMLCleaner()
