"""
Static mapping from curriculum ids to knowledge base files.
Paths are relative to <content_dir>/knowledge-base.
"""

MODULE_TO_KNOWLEDGE_DIRS: dict[str, list[str]] = {
    "01-introduction": ["01-introduction"],
    "02-core-services": ["02-core-services"],
    "03-agent-patterns": ["03-agent-patterns"],
    "04-hands-on-build": ["04-hands-on"],
    "05-security-iam": ["05-security"],
    "06-operations": ["06-operations"],
    "07-advanced-topics": ["07-advanced"],
    "08-deployment": ["08-deployment"],
}

LESSON_TO_KNOWLEDGE_FILES: dict[str, list[str]] = {
    # Module 1: Introduction
    "01-what-is-agentcore": ["01-introduction/what-is-agentcore.md"],
    "02-architecture-overview": ["01-introduction/architecture-overview.md"],
    "03-key-concepts": ["01-introduction/key-concepts.md"],
    # Module 2: Core Services
    "01-service-overview": [
        "02-core-services/runtime-service.md",
        "02-core-services/memory-service.md",
        "02-core-services/gateway-service.md",
        "02-core-services/identity-service.md",
    ],
    "02-runtime-service": ["02-core-services/runtime-service.md"],
    "03-memory-service": ["02-core-services/memory-service.md"],
    "04-tool-service": [
        "02-core-services/gateway-service.md",
        "03-agent-patterns/tool-selection-patterns.md",
    ],
    # Module 3: Agent Patterns
    "01-tool-selection": ["03-agent-patterns/tool-selection-patterns.md"],
    "02-memory-patterns": ["02-core-services/memory-service.md"],
    "03-custom-tools": [
        "03-agent-patterns/tool-selection-patterns.md",
        "04-hands-on/building-first-agent.md",
    ],
    # Module 4: Hands-On Build
    "01-project-setup": ["04-hands-on/building-first-agent.md"],
    "02-basic-agent": ["04-hands-on/building-first-agent.md"],
    "03-adding-tools": [
        "04-hands-on/building-first-agent.md",
        "03-agent-patterns/tool-selection-patterns.md",
    ],
    # Module 5: Security & IAM
    "01-iam-basics": ["05-security/iam-and-permissions.md"],
    "02-data-privacy": ["05-security/iam-and-permissions.md"],
    "03-security-best-practices": ["05-security/iam-and-permissions.md"],
    # Module 6: Operations
    "01-cost-optimization": ["06-operations/monitoring-and-observability.md"],
    "02-monitoring": ["06-operations/monitoring-and-observability.md"],
    "03-error-handling": ["06-operations/monitoring-and-observability.md"],
    # Module 7: Advanced Topics
    "01-multi-agent": ["07-advanced/multi-agent-orchestration.md"],
    "02-evaluation": ["07-advanced/agent-evaluation.md"],
    "03-scaling": ["07-advanced/scaling-strategies.md"],
    # Module 8: Deployment
    "01-testing-strategies": ["08-deployment/testing-strategies.md"],
    "02-deployment-patterns": ["08-deployment/deployment-patterns.md"],
    "03-going-live": ["08-deployment/production-checklist.md"],
}
