"""
Selector model - a ranked set of strategies addressing one UI element.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Coordinates:
    """A viewport point in CSS pixels."""
    x: float
    y: float
    
    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Coordinates":
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass(frozen=True)
class Selector:
    """
    Addressing strategies for a single element.
    
    Resolution order is fixed: css, xpath, text, coordinates. A selector
    with none of them set is invalid and never resolves.
    
    Attributes:
        css: CSS selector
        xpath: XPath expression
        text: Visible text the element equals or contains
        coordinates: Element center, used as a last resort
    """
    css: Optional[str] = None
    xpath: Optional[str] = None
    text: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    
    @property
    def strategies(self) -> List[str]:
        """Names of the strategies present, in resolution order."""
        present = []
        if self.css:
            present.append("css")
        if self.xpath:
            present.append("xpath")
        if self.text:
            present.append("text")
        if self.coordinates is not None:
            present.append("coordinates")
        return present
    
    @property
    def is_valid(self) -> bool:
        """A selector needs at least one addressing strategy."""
        return bool(self.strategies)
    
    def describe(self) -> str:
        """Short human-readable form for logs and error messages."""
        if self.css:
            return self.css
        if self.xpath:
            return f"xpath={self.xpath}"
        if self.text:
            return f"text={self.text}"
        if self.coordinates is not None:
            return f"point({self.coordinates.x:g}, {self.coordinates.y:g})"
        return "<empty selector>"
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, omitting absent strategies."""
        result: Dict[str, Any] = {}
        if self.css:
            result["css"] = self.css
        if self.xpath:
            result["xpath"] = self.xpath
        if self.text:
            result["text"] = self.text
        if self.coordinates is not None:
            result["coordinates"] = self.coordinates.to_dict()
        return result
    
    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Selector":
        """Create from dictionary. Unknown keys are ignored."""
        data = data or {}
        coordinates = data.get("coordinates")
        return cls(
            css=data.get("css") or None,
            xpath=data.get("xpath") or None,
            text=data.get("text") or None,
            coordinates=Coordinates.from_dict(coordinates) if coordinates else None,
        )
