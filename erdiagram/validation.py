"""
Input validation - Check entity relationship data for structural issues.

Unlike graph construction, which stops at the first broken reference,
validation reports every issue it finds so a whole data set can be fixed
in one pass.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .models import EntityRelationshipData


class IssueSeverity(str, Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Diagram construction will fail
    WARNING = "warning"  # Potential problem, should review
    INFO = "info"        # Informational, may be intentional


@dataclass
class ValidationIssue:
    """A single validation issue found in the input data."""
    severity: IssueSeverity
    message: str
    entity: str | None = None
    relationship: int | None = None  # Index into the relationship list

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "type": self.severity.value,
            "message": self.message
        }
        if self.entity:
            result["entity"] = self.entity
        if self.relationship is not None:
            result["relationship"] = self.relationship
        return result


def validate_data(data: Union[EntityRelationshipData, dict]) -> list[ValidationIssue]:
    """
    Validate input data and return a list of issues.

    Checks for:
    - Missing entity or property references - ERROR
    - Entities without properties - WARNING
    - Orphan entities (no relationships) - WARNING
    - Duplicate relationships (same endpoints) - WARNING
    - Self-referencing relationships - INFO
    - Empty data - INFO

    Args:
        data: The entity relationship data to validate

    Returns:
        List of ValidationIssue objects
    """
    if not isinstance(data, EntityRelationshipData):
        data = EntityRelationshipData.model_validate(data)

    issues: list[ValidationIssue] = []
    entities = data.entities

    if not entities:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message="Data has no entities"
        ))
        if not data.relationships:
            return issues

    # Check for entities without properties
    for name, descriptor in entities.items():
        if not descriptor.properties:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message="Entity has no properties",
                entity=name
            ))

    # Check for invalid references
    connected: set[str] = set()
    seen_pairs: set[tuple[str, str, str, str]] = set()
    for index, relationship in enumerate(data.relationships):
        broken = False
        for end in (relationship.source, relationship.target):
            descriptor = entities.get(end.entity)
            if descriptor is None:
                issues.append(ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    message=f"Relationship references non-existent entity: {end.entity}",
                    relationship=index
                ))
                broken = True
            elif end.property not in {p.name for p in descriptor.properties}:
                issues.append(ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    message=f"Relationship references non-existent property: {end.entity}.{end.property}",
                    entity=end.entity,
                    relationship=index
                ))
                broken = True
        if broken:
            continue

        connected.add(relationship.source.entity)
        connected.add(relationship.target.entity)

        if relationship.source.entity == relationship.target.entity:
            issues.append(ValidationIssue(
                severity=IssueSeverity.INFO,
                message="Self-referencing relationship (entity points to itself)",
                entity=relationship.source.entity,
                relationship=index
            ))

        pair = (
            relationship.source.entity, relationship.source.property,
            relationship.target.entity, relationship.target.property,
        )
        if pair in seen_pairs:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Duplicate relationship from {pair[0]}.{pair[1]} to {pair[2]}.{pair[3]}",
                relationship=index
            ))
        else:
            seen_pairs.add(pair)

    # Check for orphan entities (no relationships)
    orphans = [name for name in entities if name not in connected]
    if orphans and len(entities) > 1:
        issues.append(ValidationIssue(
            severity=IssueSeverity.WARNING,
            message=f"Orphan entities (no relationships): {', '.join(orphans)}"
        ))

    return issues


def validation_summary(issues: list[ValidationIssue]) -> dict:
    """
    Create a summary of validation issues.

    Args:
        issues: List of validation issues

    Returns:
        Dictionary with counts by severity
    """
    return {
        "total": len(issues),
        "errors": len([i for i in issues if i.severity == IssueSeverity.ERROR]),
        "warnings": len([i for i in issues if i.severity == IssueSeverity.WARNING]),
        "info": len([i for i in issues if i.severity == IssueSeverity.INFO]),
        "valid": len([i for i in issues if i.severity == IssueSeverity.ERROR]) == 0
    }
