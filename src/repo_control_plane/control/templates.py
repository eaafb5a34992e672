"""Built-in repository templates.

Templates are plain data: a name, a version, the deploy target the scaffolded
unit is expected to ship to, the secrets it needs, and a set of files with
`{{name}}` / `{{description}}` placeholders. `resolve_template` renders a fresh
:class:`RepoTemplate` on every call so later catalog edits never change what
an earlier scaffold recorded.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_ID = "container-service"


@dataclass(frozen=True, slots=True)
class TemplateFile:
    path: str
    content: str


@dataclass(frozen=True, slots=True)
class RepoTemplate:
    """A fully rendered template, ready to be committed file by file."""

    id: str
    name: str
    version: str
    language: str
    deploy_target: str
    description: str
    secrets: tuple[str, ...]
    files: tuple[TemplateFile, ...]


@dataclass(frozen=True, slots=True)
class _TemplateDefinition:
    id: str
    name: str
    version: str
    language: str
    deploy_target: str
    description: str
    secrets: tuple[str, ...]
    files: tuple[TemplateFile, ...]


_README_BODY = """# {{name}}

{{description}}

## Architecture

{architecture}

## Getting started

```bash
cp .env.example .env
{getting_started}
```

## Configuration

{secrets}
"""

_DOCKERFILE = """# syntax=docker/dockerfile:1

FROM node:20-alpine AS deps
WORKDIR /app
COPY package*.json ./
RUN npm ci

FROM node:20-alpine AS build
WORKDIR /app
COPY --from=deps /app/node_modules ./node_modules
COPY . .
RUN npm run build

FROM node:20-alpine AS runtime
WORKDIR /app
ENV NODE_ENV=production
COPY --from=build /app/dist ./dist
COPY --from=deps /app/node_modules ./node_modules
COPY package*.json ./
EXPOSE 3000
CMD ["node", "dist/index.js"]
"""


def _readme(*, architecture: str, getting_started: str, secrets: tuple[str, ...]) -> str:
    listed = "\n".join(f"- `{s}`" for s in secrets) or "- none"
    return (
        _README_BODY.replace("{architecture}", architecture)
        .replace("{getting_started}", getting_started)
        .replace("{secrets}", listed)
    )


def _env_example(secrets: tuple[str, ...]) -> str:
    lines = ["# {{name}}", "# Copy to .env and fill in values", ""]
    lines.extend(f"{secret}=" for secret in secrets)
    return "\n".join(lines) + "\n"


def _manifest(document: dict[str, object]) -> str:
    return json.dumps(document, indent=2) + "\n"


def _container_service() -> _TemplateDefinition:
    secrets = ("DATABASE_URL", "API_KEY")
    return _TemplateDefinition(
        id="container-service",
        name="Container Service",
        version="1.2.0",
        language="typescript",
        deploy_target="docker",
        description="Long-running HTTP service packaged as a container image",
        secrets=secrets,
        files=(
            TemplateFile(
                "README.md",
                _readme(
                    architecture=(
                        "A single Node.js HTTP service built in a multi-stage container "
                        "image and listening on port 3000."
                    ),
                    getting_started="docker build -t {{name}} .\ndocker run -p 3000:3000 {{name}}",
                    secrets=secrets,
                ),
            ),
            TemplateFile(
                "service.json",
                _manifest(
                    {
                        "name": "{{name}}",
                        "description": "{{description}}",
                        "runtime": "container",
                        "port": 3000,
                        "healthcheck": "/healthz",
                    }
                ),
            ),
            TemplateFile(".env.example", _env_example(secrets)),
            TemplateFile("Dockerfile", _DOCKERFILE),
        ),
    )


def _serverless_app() -> _TemplateDefinition:
    secrets = ("NEXT_PUBLIC_API_URL", "VERCEL_TOKEN")
    return _TemplateDefinition(
        id="serverless-app",
        name="Serverless App",
        version="1.0.3",
        language="typescript",
        deploy_target="vercel",
        description="Next.js application deployed to Vercel serverless functions",
        secrets=secrets,
        files=(
            TemplateFile(
                "README.md",
                _readme(
                    architecture=(
                        "A Next.js application. Pages render at the edge and API routes run "
                        "as Vercel serverless functions."
                    ),
                    getting_started="npm install\nnpm run dev",
                    secrets=secrets,
                ),
            ),
            TemplateFile(
                "vercel.json",
                _manifest(
                    {
                        "name": "{{name}}",
                        "framework": "nextjs",
                        "buildCommand": "npm run build",
                        "env": {"APP_DESCRIPTION": "{{description}}"},
                    }
                ),
            ),
            TemplateFile(".env.example", _env_example(secrets)),
        ),
    )


def _library() -> _TemplateDefinition:
    secrets = ("NPM_TOKEN",)
    return _TemplateDefinition(
        id="library",
        name="Library",
        version="0.4.0",
        language="typescript",
        deploy_target="npm",
        description="Reusable TypeScript package published to a registry",
        secrets=secrets,
        files=(
            TemplateFile(
                "README.md",
                _readme(
                    architecture="A dependency-free TypeScript package compiled to ES modules.",
                    getting_started="npm install\nnpm run build",
                    secrets=secrets,
                ),
            ),
            TemplateFile(
                "package.json",
                _manifest(
                    {
                        "name": "{{name}}",
                        "version": "0.1.0",
                        "description": "{{description}}",
                        "type": "module",
                        "scripts": {"build": "tsc -p ."},
                    }
                ),
            ),
            TemplateFile(".env.example", _env_example(secrets)),
        ),
    )


_CATALOG: dict[str, _TemplateDefinition] = {
    definition.id: definition
    for definition in (_container_service(), _serverless_app(), _library())
}


def list_templates() -> list[RepoTemplate]:
    """Return every built-in template rendered with its own placeholders intact."""

    return [
        _materialize(d, target_name="{{name}}", description="{{description}}")
        for d in _CATALOG.values()
    ]


def is_known_template(template_id: str) -> bool:
    return template_id.strip() in _CATALOG


def resolve_template(template_id: str, target_name: str, description: str) -> RepoTemplate:
    """Render the template `template_id` for `target_name`.

    An unrecognized id resolves to the default template. The substitution is
    logged at WARNING so a caller typo is visible without blocking the caller.
    """

    definition = _CATALOG.get(template_id.strip())
    if definition is None:
        logger.warning(
            "Unknown template id; falling back to default",
            extra={"template_id": template_id, "default_template_id": DEFAULT_TEMPLATE_ID},
        )
        definition = _CATALOG[DEFAULT_TEMPLATE_ID]
    return _materialize(definition, target_name=target_name, description=description)


def _materialize(
    definition: _TemplateDefinition, *, target_name: str, description: str
) -> RepoTemplate:
    rendered = tuple(
        TemplateFile(f.path, _render(f.path, f.content, name=target_name, description=description))
        for f in definition.files
    )
    return RepoTemplate(
        id=definition.id,
        name=definition.name,
        version=definition.version,
        language=definition.language,
        deploy_target=definition.deploy_target,
        description=definition.description,
        secrets=definition.secrets,
        files=rendered,
    )


def _render(path: str, content: str, *, name: str, description: str) -> str:
    if path.endswith(".json"):
        # Values land inside JSON string literals.
        name = json.dumps(name)[1:-1]
        description = json.dumps(description)[1:-1]
    return content.replace("{{name}}", name).replace("{{description}}", description)
