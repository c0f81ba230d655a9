"""FastAPI app: serve workspaces, dependency reports and configuration hints for a frontend."""

from __future__ import annotations

import os
from pathlib import Path

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from depsettle.api import FileReferences, analyze_project, list_workspaces
from depsettle.core.constants import ROOT_WORKSPACE_NAME
from depsettle.errors import DepsettleError

ROOT_ENV_VAR = "DEPSETTLE_ROOT"


class FileReferencesIn(BaseModel):
    """One reference unit, as posted by a source analyzer."""

    workspace: str = ROOT_WORKSPACE_NAME
    file: str = ""
    dependencies: list[str] = Field(default_factory=list)
    binaries: list[str] = Field(default_factory=list)


def create_app(root: Path | None = None) -> FastAPI:
    """Build the API for the repository at `root` (default: $DEPSETTLE_ROOT or cwd)."""
    repo_root = Path(root or os.environ.get(ROOT_ENV_VAR, ".")).resolve()

    app = FastAPI(
        title="depsettle API",
        description="Unused, unlisted and misclassified dependencies of a JS monorepo",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/workspaces")
    def get_workspaces() -> dict:
        """List workspaces of the repository, root first."""
        try:
            workspaces = list_workspaces(repo_root)
        except DepsettleError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return {"root": str(repo_root), "workspaces": [ws.to_dict() for ws in workspaces]}

    @app.get("/api/report")
    def get_report(strict: bool | None = Query(None)) -> dict:
        """Report from manifest scripts only (no source references)."""
        try:
            report = analyze_project(repo_root, strict=strict)
        except DepsettleError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return report.to_dict()

    @app.post("/api/report")
    def post_report(
        references: list[FileReferencesIn],
        strict: bool | None = Query(None),
        jobs: int = Query(1, ge=1, le=64),
    ) -> dict:
        """Report for a reference feed posted by a source analyzer."""
        units = [
            FileReferences(r.workspace, r.file, list(r.dependencies), list(r.binaries))
            for r in references
        ]
        try:
            report = analyze_project(repo_root, references=units, strict=strict, jobs=jobs)
        except DepsettleError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return report.to_dict()

    @app.get("/api/hints")
    def get_hints() -> dict:
        """Ignore-list entries that can be removed from the config."""
        try:
            report = analyze_project(repo_root)
        except DepsettleError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return {"hints": [h.to_dict() for h in report.hints]}

    return app
