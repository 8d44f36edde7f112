"""Parameterized Cypher templates for the service inventory."""

SERVICES_FOR_ORGANIZATION = """
MATCH (s:Service {organizationId: $organization_id})
OPTIONAL MATCH (s)-[:EXPOSES]->(i:Interface)
WITH s, collect(i {.*}) AS interfaces
OPTIONAL MATCH (s)-[:DEPENDS_ON]->(d:Dependency)
RETURN s {.*} AS service, interfaces, collect(d {.*}) AS dependencies
ORDER BY s.id
"""

MERGE_SERVICE = """
MERGE (s:Service {id: $id})
SET s += $properties
RETURN s.id AS id
"""

MERGE_INTERFACE = """
MATCH (s:Service {id: $service_id})
MERGE (i:Interface {id: $id})
SET i += $properties
MERGE (s)-[:EXPOSES]->(i)
RETURN i.id AS id
"""

MERGE_DEPENDENCY = """
MATCH (s:Service {id: $service_id})
MERGE (d:Dependency {id: $id})
SET d += $properties
MERGE (s)-[:DEPENDS_ON]->(d)
RETURN d.id AS id
"""

DELETE_ORGANIZATION_INVENTORY = """
MATCH (s:Service {organizationId: $organization_id})
OPTIONAL MATCH (s)-[:EXPOSES|DEPENDS_ON]->(child)
DETACH DELETE s, child
"""
