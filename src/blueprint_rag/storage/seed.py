"""Built-in platform documentation, available even without a database."""

from __future__ import annotations

from typing import Dict, List, Tuple

from blueprint_rag.documents import Document, utcnow

_SEED: Dict[str, List[dict]] = {
    "replit": [
        {
            "id": "repl_1",
            "title": "Replit AI Agent Capabilities",
            "content": (
                "Replit Agent provides intelligent coding assistance with automatic dependency "
                "management, real-time collaboration, and instant deployment. Features include "
                "code generation, debugging assistance, and project setup automation."
            ),
            "document_type": "ai-features",
            "keywords": ["ai-agent", "coding-assistance", "deployment", "collaboration"],
        },
        {
            "id": "repl_2",
            "title": "Database Integration Support",
            "content": (
                "Seamless database integration with PostgreSQL, MySQL, MongoDB, and SQLite. "
                "Automated ORM setup with Prisma, Drizzle, and TypeORM. Database schema "
                "generation and migration management."
            ),
            "document_type": "database",
            "keywords": ["database", "postgresql", "mysql", "mongodb", "prisma", "drizzle"],
        },
    ],
    "lovable": [
        {
            "id": "lov_1",
            "title": "AI Fullstack Development",
            "content": (
                "Lovable 2.0 AI Fullstack Engineer enables production-ready application "
                "development through conversational AI. Features \"vibe coding\" philosophy "
                "with React/Tailwind/Vite frontend and Supabase backend integration."
            ),
            "document_type": "ai-fullstack",
            "keywords": ["ai-engineer", "vibe-coding", "react", "tailwind", "supabase"],
        },
    ],
    "bolt": [
        {
            "id": "bolt_1",
            "title": "Instant Development Environment",
            "content": (
                "Bolt.new provides instant full-stack development with WebContainers "
                "technology. Zero-setup environment with package management, real-time "
                "preview, and instant deployment capabilities."
            ),
            "document_type": "development-environment",
            "keywords": ["webcontainers", "instant-setup", "full-stack", "preview"],
        },
    ],
    "cursor": [
        {
            "id": "cur_1",
            "title": "AI-Powered Code Intelligence",
            "content": (
                "Cursor IDE offers advanced AI-powered code completion, generation, and "
                "refactoring. Context-aware suggestions, intelligent debugging, and codebase "
                "understanding with multi-file editing capabilities."
            ),
            "document_type": "ai-ide",
            "keywords": ["ai-completion", "code-generation", "refactoring", "debugging"],
        },
    ],
    "windsurf": [
        {
            "id": "wind_1",
            "title": "Collaborative AI Development",
            "content": (
                "Windsurf by Codeium provides collaborative AI coding with advanced context "
                "management. Multi-file editing, large codebase handling, and semantic code "
                "analysis with AI assistance."
            ),
            "document_type": "collaborative-ai",
            "keywords": ["collaborative", "context-management", "multi-file", "semantic-analysis"],
        },
    ],
}


def build_seed_documents() -> Dict[str, Tuple[Document, ...]]:
    """Materialize the seed corpus, grouped by platform, stamped with the current time."""
    seeded_at = utcnow()
    corpus: Dict[str, Tuple[Document, ...]] = {}
    for platform, rows in _SEED.items():
        corpus[platform] = tuple(
            Document(
                id=row["id"],
                title=row["title"],
                content=row["content"],
                platform=platform,
                document_type=row["document_type"],
                keywords=list(row["keywords"]),
                created_at=seeded_at,
                updated_at=seeded_at,
                origin="memory",
            )
            for row in rows
        )
    return corpus
