from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class SetupStep:
    order: int
    method: str
    class_name: str
    params: List[str] = field(default_factory=list)
    description: str = ""
    comment: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            "order": self.order,
            "method": self.method,
            "class": self.class_name,
            "params": list(self.params),
            "description": self.description,
        }
        if self.comment:
            result["comment"] = self.comment
        return result


@dataclass(frozen=True)
class NavigationStep:
    order: int
    screen: str
    class_name: str
    method: str
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "order": self.order,
            "screen": self.screen,
            "class": self.class_name,
            "method": self.method,
            "description": self.description,
        }


@dataclass(frozen=True)
class TestDataRequirement:
    type: str
    variable: Optional[str] = None
    description: str = ""
    context: Optional[str] = None
    setup: Optional[str] = None
    item_setup: Optional[str] = None
    cleanup: Optional[str] = None

    __test__ = False

    def to_dict(self) -> dict:
        result = {"type": self.type, "description": self.description}
        optional = {
            "variable": self.variable,
            "context": self.context,
            "setup": self.setup,
            "itemSetup": self.item_setup,
            "cleanup": self.cleanup,
        }
        result.update({k: v for k, v in optional.items() if v is not None})
        return result


@dataclass(frozen=True)
class PrerequisitePlan:
    """
    Everything a test must do before its first mapped action runs.

    ``content_pattern`` names the CTV content macro when one replaced the
    graph-derived path; in that case ``navigation_path`` is empty and the
    macro steps are the setup sequence.
    """
    target_screen: str
    imports: List[str]
    setup_sequence: List[SetupStep]
    navigation_to_target: List[NavigationStep]
    test_data_requirements: List[TestDataRequirement]
    screen_chain: List[str]
    navigation_path: List[str] = field(default_factory=list)
    platform: Optional[str] = None
    brand: Optional[str] = None
    content_pattern: Optional[str] = None

    @property
    def uses_content_pattern(self) -> bool:
        return self.content_pattern is not None

    def to_dict(self) -> dict:
        result = {
            "targetScreen": self.target_screen,
            "prerequisites": {
                "imports": list(self.imports),
                "setupSequence": [s.to_dict() for s in self.setup_sequence],
                "navigationToTarget": [n.to_dict() for n in self.navigation_to_target],
                "testDataRequirements": [r.to_dict() for r in self.test_data_requirements],
            },
            "navigationPath": list(self.navigation_path),
            "screenChain": list(self.screen_chain),
            "platform": self.platform,
            "brand": self.brand,
        }
        if self.content_pattern:
            result["contentPattern"] = self.content_pattern
        return result
