"""Pytest configuration and shared design-document fixtures.

No sys.path hacks - tests should import from installed formsmith package.
"""

import json
import pytest
from pathlib import Path


def _group(node_id, label, x, y):
    """A label + input field group as the design tool exports it."""
    return {
        "id": node_id,
        "name": "Form Group",
        "type": "FRAME",
        "absoluteBoundingBox": {"x": x, "y": y, "width": 240, "height": 64},
        "children": [
            {"id": f"{node_id}:label", "name": "Label", "type": "TEXT", "characters": label},
            {"id": f"{node_id}:input", "name": "Input", "type": "INSTANCE"},
        ],
    }


@pytest.fixture
def sample_design():
    """A create screen with two sections; the footer sits outside any section."""
    return {
        "id": "1:1",
        "name": "Create Plan Screen",
        "type": "FRAME",
        "children": [
            {
                "id": "1:2",
                "name": "Section: Plan Details",
                "type": "FRAME",
                "children": [
                    {
                        "id": "1:3",
                        "name": "Row",
                        "type": "FRAME",
                        "children": [
                            _group("1:5", "Effective Date", 300, 5),
                            _group("1:4", "Plan Name", 0, 0),
                        ],
                    },
                    {
                        "id": "1:6",
                        "name": "Row",
                        "type": "FRAME",
                        "children": [_group("1:7", "Monthly Premium Amount", 0, 100)],
                    },
                ],
            },
            {
                "id": "1:8",
                "name": "Section: Coverage",
                "type": "FRAME",
                "children": [
                    {
                        "id": "1:9",
                        "name": "Subsection: In Network",
                        "type": "FRAME",
                        "children": [
                            _group("1:10", "Annual Deductible", 0, 200),
                            _group("1:11", "Email Address", 300, 200),
                        ],
                    },
                ],
            },
            {
                "id": "1:12",
                "name": "Footer",
                "type": "FRAME",
                "children": [_group("1:13", "Notes", 0, 400)],
            },
        ],
    }


@pytest.fixture
def design_file(tmp_path, sample_design):
    """The sample design wrapped in a nodes-endpoint response."""
    path = tmp_path / "design.json"
    path.write_text(json.dumps({"nodes": {"1:1": {"document": sample_design}}}), encoding="utf-8")
    return path


@pytest.fixture
def mapping_csv(tmp_path):
    path = tmp_path / "db_mapping.csv"
    path.write_text(
        "field_name,db_column\n"
        "Plan Name,Plan.Name\n"
        "effective date,Plan.EffectiveDate\n"
        "Monthly Premium Amount,EmpValue.PremiumBalance\n"
        "Annual Deductible,Coverage.DeductibleBalance\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def computed_csv(tmp_path):
    path = tmp_path / "computed.csv"
    path.write_text(
        "field_name,formula\n"
        "Monthly Premium Amount,annualPremium / 12\n",
        encoding="utf-8",
    )
    return path
