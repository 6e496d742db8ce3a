"""CLI 엔트리포인트."""

import asyncio
import logging
from collections.abc import Coroutine
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from repo_detailer.config import settings
from repo_detailer.errors import DetailerError
from repo_detailer.models import (
    AnalysisRequest,
    AuthMode,
    Job,
    JobStatus,
    RepositorySummary,
    TemplateExport,
)
from repo_detailer.pipeline import AnalysisOutcome, AnalysisPipeline, build_pipeline
from repo_detailer.sources import Credential, GitHubRepoClient, parse_repository

console = Console()

T = TypeVar("T")

app = typer.Typer(
    name="repo-detailer",
    help="GitHub 저장소를 분석해 AI 어시스턴트용 컨텍스트 문서를 생성합니다.",
    no_args_is_help=True,
)
templates_app = typer.Typer(help="템플릿 관리", no_args_is_help=True)
jobs_app = typer.Typer(help="최근 분석 작업 관리", no_args_is_help=True)
token_app = typer.Typer(help="GitHub 토큰 관리", no_args_is_help=True)
app.add_typer(templates_app, name="templates")
app.add_typer(jobs_app, name="jobs")
app.add_typer(token_app, name="token")

STATUS_STYLES = {
    JobStatus.queued: "dim",
    JobStatus.analyzing: "yellow",
    JobStatus.completed: "green",
    JobStatus.failed: "red",
}


def _fail(message: object) -> typer.Exit:
    console.print(f"[red]오류 발생: {message}[/red]")
    return typer.Exit(1)


def _run(coro: Coroutine[Any, Any, T], description: str) -> T:
    """스피너를 보여주며 코루틴을 실행한다."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(description, total=None)
        return asyncio.run(coro)


def _credential(pipeline: AnalysisPipeline, public: bool) -> Credential:
    """저장된 토큰 또는 환경 변수 토큰으로 자격 증명을 만든다."""
    if public:
        return Credential.anonymous()
    return pipeline.preferences.credential(fallback_token=settings.github_token)


def _github(pipeline: AnalysisPipeline) -> GitHubRepoClient:
    """파이프라인이 쓰는 GitHub 클라이언트를 재사용한다."""
    if isinstance(pipeline.source, GitHubRepoClient):
        return pipeline.source
    return GitHubRepoClient()


def _write_output(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise _fail(f"{path}에 쓸 수 없습니다: {e}") from e


def _render_repositories(repos: list[RepositorySummary], title: str) -> None:
    if not repos:
        console.print("[yellow]저장소가 없습니다.[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold cyan", expand=True)
    table.add_column("#", style="dim", width=3)
    table.add_column("저장소", style="bold")
    table.add_column("언어", width=12)
    table.add_column("⭐ Stars", justify="right", width=10)
    table.add_column("설명")

    for i, repo in enumerate(repos, 1):
        table.add_row(
            str(i),
            f"[link={repo.url}]{repo.full_name}[/link]" if repo.url else repo.full_name,
            repo.language,
            f"{repo.stars:,}",
            repo.description or "-",
        )
    console.print(table)


def _render_jobs(jobs: list[Job]) -> None:
    if not jobs:
        console.print("[yellow]최근 작업이 없습니다.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("ID", style="dim", width=12)
    table.add_column("저장소", style="bold")
    table.add_column("템플릿")
    table.add_column("상태", width=10)
    table.add_column("시각")
    table.add_column("비고")

    for job in jobs:
        style = STATUS_STYLES[job.status]
        note = job.error or ("다운로드됨" if job.downloaded else "")
        table.add_row(
            job.id[:12],
            job.repository,
            job.template,
            f"[{style}]{job.status.value}[/{style}]",
            job.timestamp.strftime("%Y-%m-%d %H:%M"),
            note,
        )
    console.print(table)


def _report(
    pipeline: AnalysisPipeline,
    outcome: AnalysisOutcome,
    document: str | None,
    output: Path | None,
) -> None:
    """분석 결과를 출력하거나 파일로 저장한다."""
    if outcome.result is None:
        raise _fail(outcome.job.error or outcome.error)

    basic, analysis = outcome.result.basic, outcome.result.analysis
    console.print(
        Panel(
            f"{basic.description or '설명 없음'}\n\n"
            f"언어: {basic.language}  |  프레임워크: {analysis.framework}  |  "
            f"⭐ {basic.stars:,}  |  기여자: {analysis.contributors}",
            title=f"[bold]{basic.full_name}[/bold]",
            border_style="blue",
        )
    )

    if document is None:
        return
    if output is None:
        console.print(Markdown(document))
        return

    _write_output(output, document)
    pipeline.ledger.mark_downloaded(outcome.job.id)
    console.print(f"[green]✓[/green] 문서를 저장했습니다: {output}")


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="디버그 로그 출력")
    ] = False,
) -> None:
    """GitHub 저장소를 분석해 AI 어시스턴트용 컨텍스트 문서를 생성합니다."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.command()
def analyze(
    target: Annotated[str, typer.Argument(help="저장소 URL 또는 owner/name")],
    template: Annotated[
        str, typer.Option("--template", "-t", help="템플릿 ID")
    ] = settings.default_template,
    branch: Annotated[
        str | None, typer.Option("--branch", "-b", help="분석할 브랜치")
    ] = None,
    instructions: Annotated[
        str, typer.Option("--instructions", "-i", help="문서 끝에 추가할 지시사항")
    ] = "",
    public: Annotated[
        bool, typer.Option("--public", help="저장된 토큰을 쓰지 않고 비인증으로 조회")
    ] = False,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="문서를 저장할 파일")
    ] = None,
    details: Annotated[
        bool, typer.Option("--details", help="템플릿 대신 고정 형식 상세 문서 생성")
    ] = False,
) -> None:
    """저장소를 분석하고 컨텍스트 문서를 생성합니다."""
    try:
        pipeline = build_pipeline(settings)
        credential = _credential(pipeline, public)
        request = AnalysisRequest(
            repository=parse_repository(target),
            template=template,
            branch=branch or None,
            custom_instructions=instructions,
            auth_mode=credential.auth_mode,
        )
        outcome, document = _run(
            pipeline.run(request, credential, details=details),
            f"{request.repository} 분석 중...",
        )
    except KeyboardInterrupt:
        console.print("\n[dim]중단됨[/dim]")
        raise typer.Exit(0) from None
    except DetailerError as e:
        raise _fail(e) from e

    _report(pipeline, outcome, document, output)


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="검색어")],
    limit: Annotated[
        int, typer.Option("--limit", "-n", min=1, max=100, help="최대 결과 수")
    ] = 20,
) -> None:
    """GitHub 저장소를 검색합니다 (스타 수 순)."""
    try:
        pipeline = build_pipeline(settings)
        client = _github(pipeline)
        repos = _run(
            client.search_repositories(query, _credential(pipeline, False), limit=limit),
            f"'{query}' 검색 중...",
        )
    except DetailerError as e:
        raise _fail(e) from e

    _render_repositories(repos, f"🔍 '{query}' 검색 결과")


@app.command()
def repos() -> None:
    """토큰 사용자의 저장소 목록을 보여줍니다."""
    try:
        pipeline = build_pipeline(settings)
        client = _github(pipeline)
        user_repos = _run(
            client.fetch_user_repositories(_credential(pipeline, False)),
            "저장소 목록 조회 중...",
        )
    except DetailerError as e:
        raise _fail(e) from e

    _render_repositories(user_repos, "📦 내 저장소")


# --- templates ---


@templates_app.command("list")
def templates_list() -> None:
    """사용 가능한 템플릿 목록."""
    registry = build_pipeline(settings).registry

    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("ID", style="bold")
    table.add_column("이름")
    table.add_column("섹션", justify="right", width=6)
    table.add_column("종류", width=8)
    table.add_column("설명")

    for template in registry.list_all():
        table.add_row(
            template.id,
            f"{template.icon} {template.name}",
            str(len(template.sections)),
            "[dim]내장[/dim]" if template.builtin else "[green]사용자[/green]",
            template.description,
        )
    console.print(table)


@templates_app.command("show")
def templates_show(
    template_id: Annotated[str, typer.Argument(help="템플릿 ID")],
) -> None:
    """템플릿의 섹션 구성을 보여줍니다."""
    try:
        template = build_pipeline(settings).registry.resolve(template_id)
    except DetailerError as e:
        raise _fail(e) from e

    body = "\n".join(f"{i}. {section}" for i, section in enumerate(template.sections, 1))
    console.print(
        Panel(
            f"{template.description}\n\n{body}" if template.description else body,
            title=f"{template.icon} {template.name} [dim]({template.id})[/dim]",
            border_style="blue",
        )
    )


@templates_app.command("create")
def templates_create(
    name: Annotated[str, typer.Argument(help="템플릿 이름")],
    sections: Annotated[
        list[str], typer.Option("--section", "-s", help="섹션 이름 (여러 번 지정)")
    ],
    description: Annotated[str, typer.Option("--description", "-d")] = "",
    icon: Annotated[str, typer.Option("--icon")] = "📋",
    public: Annotated[bool, typer.Option("--public", help="공개 템플릿")] = False,
) -> None:
    """사용자 템플릿을 만듭니다."""
    try:
        template = build_pipeline(settings).registry.create_custom(
            name, sections, description=description, icon=icon, is_public=public
        )
    except DetailerError as e:
        raise _fail(e) from e
    console.print(f"[green]✓[/green] 템플릿을 만들었습니다: {template.id}")


@templates_app.command("delete")
def templates_delete(
    template_id: Annotated[str, typer.Argument(help="템플릿 ID")],
) -> None:
    """사용자 템플릿을 삭제합니다."""
    try:
        removed = build_pipeline(settings).registry.remove_custom(template_id)
    except DetailerError as e:
        raise _fail(e) from e
    if not removed:
        console.print(f"[yellow]템플릿이 없습니다: {template_id}[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] 템플릿을 삭제했습니다: {template_id}")


@templates_app.command("export")
def templates_export(
    output: Annotated[Path, typer.Argument(help="저장할 JSON 파일")],
    template_ids: Annotated[
        list[str] | None,
        typer.Option("--id", help="내보낼 템플릿 ID. 생략하면 사용자 템플릿 전체."),
    ] = None,
) -> None:
    """템플릿을 JSON 파일로 내보냅니다."""
    try:
        bundle = build_pipeline(settings).registry.export(template_ids or None)
    except DetailerError as e:
        raise _fail(e) from e
    _write_output(output, bundle.model_dump_json(indent=2))
    console.print(f"[green]✓[/green] {bundle.total_templates}개 템플릿을 내보냈습니다: {output}")


@templates_app.command("import")
def templates_import(
    source: Annotated[Path, typer.Argument(help="내보낸 JSON 파일")],
) -> None:
    """내보낸 템플릿 묶음을 가져옵니다."""
    try:
        bundle = TemplateExport.model_validate_json(source.read_text(encoding="utf-8"))
        imported = build_pipeline(settings).registry.import_bundle(bundle)
    except OSError as e:
        raise _fail(f"{source}를 읽을 수 없습니다: {e}") from e
    except PydanticValidationError as e:
        raise _fail(f"올바른 템플릿 묶음이 아닙니다: {e.error_count()}개 오류") from e
    except DetailerError as e:
        raise _fail(e) from e
    console.print(f"[green]✓[/green] {len(imported)}개 템플릿을 가져왔습니다.")


# --- jobs ---


@jobs_app.command("list")
def jobs_list() -> None:
    """최근 분석 작업 목록 (최신순)."""
    _render_jobs(build_pipeline(settings).ledger.list())


@jobs_app.command("clear")
def jobs_clear(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="확인 없이 삭제")] = False,
) -> None:
    """작업 기록을 모두 지웁니다."""
    if not yes and not typer.confirm("작업 기록을 모두 지울까요?"):
        raise typer.Exit(0)
    if not build_pipeline(settings).ledger.clear():
        raise _fail("작업 기록을 지우지 못했습니다. 로그를 확인하세요.")
    console.print("[green]✓[/green] 작업 기록을 지웠습니다.")


@jobs_app.command("export")
def jobs_export(
    output: Annotated[Path, typer.Argument(help="저장할 JSON 파일")],
) -> None:
    """작업 기록을 JSON 파일로 내보냅니다."""
    export = build_pipeline(settings).ledger.export_all()
    _write_output(output, export.model_dump_json(indent=2))
    console.print(f"[green]✓[/green] {export.total_jobs}개 작업을 내보냈습니다: {output}")


@jobs_app.command("rerun")
def jobs_rerun(
    job_id: Annotated[str, typer.Argument(help="작업 ID (목록의 앞부분도 가능)")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="문서를 저장할 파일")
    ] = None,
) -> None:
    """기존 작업과 같은 조건으로 다시 분석합니다."""
    try:
        pipeline = build_pipeline(settings)
        matches = [job for job in pipeline.ledger.list() if job.id.startswith(job_id)]
        if len(matches) != 1:
            raise _fail(f"작업을 하나로 특정할 수 없습니다: {job_id}")
        previous = matches[0]
        credential = _credential(pipeline, previous.auth_mode == AuthMode.public)
        outcome = _run(
            pipeline.rerun(previous.id, credential),
            f"{previous.repository} 다시 분석 중...",
        )
        document = None
        if outcome.result is not None:
            document = pipeline.render(
                outcome.result, previous.template, previous.custom_instructions
            )
    except DetailerError as e:
        raise _fail(e) from e

    _report(pipeline, outcome, document, output)


# --- token ---


@token_app.command("set")
def token_set(
    token: Annotated[str, typer.Option(prompt=True, hide_input=True, help="GitHub 토큰")],
    verify: Annotated[
        bool, typer.Option("--verify/--no-verify", help="저장 전에 GitHub로 확인")
    ] = True,
) -> None:
    """GitHub 토큰을 저장합니다."""
    try:
        pipeline = build_pipeline(settings)
        credential = Credential.token(token)
        if verify:
            profile = _run(
                _github(pipeline).fetch_user_profile(credential),
                "토큰 확인 중...",
            )
            console.print(f"[green]✓[/green] {profile.login} 계정으로 인증되었습니다.")
        pipeline.preferences.set_token(token)
    except DetailerError as e:
        raise _fail(e) from e
    console.print("[green]✓[/green] 토큰을 저장했습니다.")


@token_app.command("clear")
def token_clear() -> None:
    """저장된 GitHub 토큰을 지웁니다."""
    pipeline = build_pipeline(settings)
    try:
        pipeline.preferences.clear_token()
    except DetailerError as e:
        raise _fail(e) from e
    console.print("[green]✓[/green] 토큰을 지웠습니다.")


@token_app.command("status")
def token_status() -> None:
    """현재 인증 상태를 보여줍니다."""
    try:
        pipeline = build_pipeline(settings)
        credential = _credential(pipeline, False)
        if credential.is_anonymous:
            console.print("[yellow]토큰이 없습니다. 공개 저장소만 조회할 수 있습니다.[/yellow]")
            return
        profile = _run(
            _github(pipeline).fetch_user_profile(credential),
            "토큰 확인 중...",
        )
    except DetailerError as e:
        raise _fail(e) from e
    console.print(
        f"[green]✓[/green] {profile.login}"
        f"{f' ({profile.name})' if profile.name else ''} 계정으로 인증됨"
        f"  |  공개 저장소 {profile.public_repos}개"
    )


if __name__ == "__main__":
    app()
