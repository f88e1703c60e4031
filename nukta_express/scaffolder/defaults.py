"""Built-in content for template sources that are not on disk.

Bundled template sources are optional, so every template id must still yield
deterministic content.  ``default_content`` dispatches on the id's base file
name; names without a dedicated generator get a short placeholder comment.
"""

from __future__ import annotations

import json
import textwrap
from pathlib import PurePosixPath
from typing import Any, Callable, Mapping

from .registry import TemplateRegistry

DefaultGenerator = Callable[[Mapping[str, Any], "TemplateRegistry | None"], str]


# ---------------------------------------------------------------------------
# JSON manifests
# ---------------------------------------------------------------------------


def package_json(data: Mapping[str, Any], registry: TemplateRegistry | None = None) -> str:
    """``package.json`` whose dependency maps come from the chosen template."""
    dependencies: dict[str, str] = {}
    dev_dependencies: dict[str, str] = {}
    template_name = data.get("template")
    if registry is not None and template_name in registry:
        definition = registry.get(template_name)
        dependencies = dict(definition.dependencies)
        dev_dependencies = dict(definition.dev_dependencies)

    name = data.get("name", "")
    author = data.get("author", "")
    manifest = {
        "name": name,
        "version": "1.0.0",
        "description": data.get("description", ""),
        "main": "src/server.ts",
        "repository": {
            "type": "git",
            "url": f"https://github.com/{author}/{name}.git",
        },
        "author": author,
        "license": data.get("license", "MIT"),
        "scripts": {
            "build": "npx tsc && npm run copy-keys",
            "start": "node build/server.js",
            "dev": "nodemon src/server.ts",
            "copy-keys": 'cpx "src/keys/**/*" build/keys',
            "test": "jest",
            "test:watch": "jest --watch",
            "lint": "eslint src/**/*.ts",
            "format": "prettier --write src/**/*.ts",
        },
        "dependencies": dependencies,
        "devDependencies": dev_dependencies,
    }
    return json.dumps(manifest, indent=2, ensure_ascii=False)


def tsconfig_json(data: Mapping[str, Any], registry: TemplateRegistry | None = None) -> str:
    config = {
        "compilerOptions": {
            "target": "ES2020",
            "module": "commonjs",
            "lib": ["ES2020"],
            "outDir": "./build",
            "rootDir": "./src",
            "strict": True,
            "esModuleInterop": True,
            "skipLibCheck": True,
            "forceConsistentCasingInFileNames": True,
            "resolveJsonModule": True,
            "declaration": True,
            "declarationMap": True,
            "sourceMap": True,
            "removeComments": True,
            "noImplicitAny": True,
            "strictNullChecks": True,
            "strictFunctionTypes": True,
            "noImplicitThis": True,
            "noImplicitReturns": True,
            "noFallthroughCasesInSwitch": True,
            "moduleResolution": "node",
            "baseUrl": "./",
            "paths": {"@/*": ["src/*"]},
            "allowSyntheticDefaultImports": True,
            "experimentalDecorators": True,
            "emitDecoratorMetadata": True,
        },
        "include": ["src/**/*"],
        "exclude": ["node_modules", "build", "dist", "**/*.test.ts", "**/*.spec.ts"],
    }
    return json.dumps(config, indent=2)


def prettier_config(data: Mapping[str, Any], registry: TemplateRegistry | None = None) -> str:
    config = {
        "semi": True,
        "trailingComma": "es5",
        "singleQuote": True,
        "printWidth": 80,
        "tabWidth": 2,
        "useTabs": False,
    }
    return json.dumps(config, indent=2)


# ---------------------------------------------------------------------------
# Plain-text files
# ---------------------------------------------------------------------------

_GITIGNORE_SECTIONS: list[tuple[str, list[str]]] = [
    ("Dependencies", ["node_modules/", "npm-debug.log*", "yarn-debug.log*", "yarn-error.log*"]),
    ("Build outputs", ["build/", "dist/", "*.tsbuildinfo"]),
    (
        "Environment variables",
        [
            ".env",
            ".env.local",
            ".env.development.local",
            ".env.test.local",
            ".env.production.local",
        ],
    ),
    ("Logs", ["logs", "*.log"]),
    ("Runtime data", ["pids", "*.pid", "*.seed", "*.pid.lock"]),
    ("Coverage", ["coverage/", "*.lcov", ".nyc_output"]),
    ("Caches", [".npm", ".eslintcache", ".cache", ".parcel-cache"]),
    ("Output of 'npm pack'", ["*.tgz"]),
    ("IDE", [".vscode/", ".idea/", "*.swp", "*.swo", "*~"]),
    ("OS", [".DS_Store", "Thumbs.db"]),
    ("Keys and certificates", ["src/keys/", "*.pem", "*.key", "*.crt"]),
]


def gitignore(data: Mapping[str, Any], registry: TemplateRegistry | None = None) -> str:
    blocks = [
        "\n".join([f"# {title}", *patterns]) for title, patterns in _GITIGNORE_SECTIONS
    ]
    return "\n\n".join(blocks) + "\n"


def readme(data: Mapping[str, Any], registry: TemplateRegistry | None = None) -> str:
    name = data.get("name", "")
    features = [
        "Express.js with TypeScript",
        "MongoDB with Mongoose",
        "Authentication & Authorization",
        "Request validation",
        "Error handling middleware",
        "Logging",
        "CORS configuration",
        "Rate limiting",
        "Security headers",
    ]
    if data.get("testing"):
        features.append("Unit and integration testing")
    if data.get("docker"):
        features.append("Docker configuration")

    prerequisites = ["Node.js (v16 or higher)", "MongoDB"]
    if data.get("docker"):
        prerequisites.append("Docker (optional)")

    lines = [
        f"# {name}",
        "",
        str(data.get("description", "")),
        "",
        "## Features",
        "",
        *[f"- {feature}" for feature in features],
        "",
        "## Quick Start",
        "",
        "### Prerequisites",
        "",
        *[f"- {item}" for item in prerequisites],
        "",
        "### Installation",
        "",
        "```bash",
        "npm install",
        "cp .env.example .env",
        "npm run dev",
        "```",
        "",
        "### Available Scripts",
        "",
        "- `npm run dev` - Start development server",
        "- `npm run build` - Build for production",
        "- `npm start` - Start production server",
        "- `npm test` - Run tests",
        "- `npm run lint` - Run ESLint",
        "- `npm run format` - Format code with Prettier",
        "",
        "## Environment Variables",
        "",
        "```env",
        "NODE_ENV=development",
        "PORT=5000",
        f"MONGODB_URI=mongodb://localhost:27017/{name}",
        "JWT_SECRET=your-jwt-secret",
        "JWT_EXPIRES_IN=7d",
        "```",
        "",
        "## License",
        "",
        f"This project is licensed under the {data.get('license', 'MIT')} License.",
        "",
    ]
    return "\n".join(lines)


def jest_config(data: Mapping[str, Any], registry: TemplateRegistry | None = None) -> str:
    return textwrap.dedent(
        """\
        module.exports = {
          preset: 'ts-jest',
          testEnvironment: 'node',
          roots: ['<rootDir>/src'],
          testMatch: ['**/__tests__/**/*.ts', '**/?(*.)+(spec|test).ts'],
          transform: {
            '^.+\\\\.ts$': 'ts-jest',
          },
          collectCoverageFrom: [
            'src/**/*.ts',
            '!src/**/*.d.ts',
            '!src/**/*.test.ts',
            '!src/**/*.spec.ts',
          ],
          coverageDirectory: 'coverage',
          coverageReporters: ['text', 'lcov', 'html'],
        };
        """
    )


def eslint_config(data: Mapping[str, Any], registry: TemplateRegistry | None = None) -> str:
    return textwrap.dedent(
        """\
        module.exports = {
          parser: '@typescript-eslint/parser',
          extends: ['eslint:recommended', 'plugin:@typescript-eslint/recommended'],
          plugins: ['@typescript-eslint'],
          env: {
            node: true,
            es6: true,
          },
          parserOptions: {
            ecmaVersion: 2020,
            sourceType: 'module',
          },
          rules: {
            '@typescript-eslint/no-unused-vars': 'error',
            '@typescript-eslint/explicit-function-return-type': 'off',
            '@typescript-eslint/explicit-module-boundary-types': 'off',
            '@typescript-eslint/no-explicit-any': 'warn',
          },
        };
        """
    )


def dockerfile(data: Mapping[str, Any], registry: TemplateRegistry | None = None) -> str:
    return textwrap.dedent(
        """\
        FROM node:18-alpine

        WORKDIR /app

        COPY package*.json ./

        RUN npm ci

        COPY . .

        RUN npm run build

        EXPOSE 5000

        CMD ["npm", "start"]
        """
    )


def docker_compose(data: Mapping[str, Any], registry: TemplateRegistry | None = None) -> str:
    name = data.get("name", "app")
    return textwrap.dedent(
        f"""\
        services:
          app:
            build: .
            ports:
              - "5000:5000"
            environment:
              - NODE_ENV=production
              - MONGODB_URI=mongodb://mongo:27017/{name}
            depends_on:
              - mongo
            restart: unless-stopped

          mongo:
            image: mongo:6
            ports:
              - "27017:27017"
            volumes:
              - mongodb_data:/data/db
            restart: unless-stopped

        volumes:
          mongodb_data:
        """
    )


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

DEFAULT_GENERATORS: dict[str, DefaultGenerator] = {
    "package.json": package_json,
    "tsconfig.json": tsconfig_json,
    ".gitignore": gitignore,
    "README.md": readme,
    "jest.config.js": jest_config,
    ".eslintrc.js": eslint_config,
    ".prettierrc": prettier_config,
    "Dockerfile": dockerfile,
    "docker-compose.yml": docker_compose,
}


def placeholder(template_id: str) -> str:
    file_name = PurePosixPath(template_id).name
    return f"// Generated file: {file_name}\n// Template: {template_id}\n"


def default_content(
    template_id: str,
    data: Mapping[str, Any],
    registry: TemplateRegistry | None = None,
) -> str:
    """Return built-in content for *template_id*, keyed by its base name."""
    generator = DEFAULT_GENERATORS.get(PurePosixPath(template_id).name)
    if generator is None:
        return placeholder(template_id)
    return generator(data, registry)
