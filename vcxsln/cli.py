"""vcxsln CLI - inspect Visual Studio solutions and their C++ projects."""

from __future__ import annotations

import logging

import click

from vcxsln.config import LoadConfig, Solution
from vcxsln.errors import DependencyCycleError, VcxslnError
from vcxsln.graph.dependency_graph import DependencyGraph
from vcxsln.loader import load_solution
from vcxsln.msbuild.evaluator import evaluate
from vcxsln.output import dumps


def _configure_logging(verbose: bool, quiet: bool) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.option("--verbose", is_flag=True, help="Log every project and skipped element")
@click.option("--quiet", is_flag=True, help="Only log errors")
def cli(verbose: bool, quiet: bool) -> None:
    """vcxsln - Read .sln and .vcxproj files into a solution model."""
    _configure_logging(verbose, quiet)


def _load(path: str, evaluate_variables: bool = False, variables: dict[str, str] | None = None) -> Solution:
    config = LoadConfig(evaluate_variables=evaluate_variables, variables=variables or {})
    try:
        return load_solution(path, config)
    except VcxslnError as e:
        raise click.ClickException(str(e)) from e


def _parse_defines(defines: tuple[str, ...]) -> dict[str, str]:
    variables = {}
    for item in defines:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got {item!r}", param_hint="-D")
        variables[name] = value
    return variables


@cli.command("show")
@click.argument("solution_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--evaluate", "evaluate_variables", is_flag=True, help="Expand $(Name) references")
@click.option("-D", "--define", "defines", multiple=True, help="Extra variable as NAME=VALUE")
def show_cmd(solution_path: str, evaluate_variables: bool, defines: tuple[str, ...]) -> None:
    """Print a summary table of the projects in a solution."""
    from rich.console import Console
    from rich.table import Table

    solution = _load(solution_path, evaluate_variables, _parse_defines(defines))
    console = Console()

    table = Table(title=f"Solution: {solution.name} (format {solution.version})", show_edge=False)
    table.add_column("Project", style="bold")
    table.add_column("Id")
    table.add_column("Configurations")
    table.add_column("Sources", justify="right")
    table.add_column("Headers", justify="right")
    table.add_column("Dependencies", justify="right")

    for project in solution.projects:
        configs = ", ".join(c.name for c in project.project_configurations)
        table.add_row(
            project.name,
            project.id,
            configs,
            str(len(project.compile_list)),
            str(len(project.include_list)),
            str(len(project.dependencies)),
        )

    console.print(table)
    if solution.configurations:
        console.print(f"Configurations: {', '.join(solution.configurations)}")

    for failure in solution.failures:
        console.print(f"[yellow]Not loaded:[/yellow] {failure.path} ({failure.reason})", soft_wrap=True)


@cli.command("dump")
@click.argument("solution_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--evaluate", "evaluate_variables", is_flag=True, help="Expand $(Name) references")
@click.option("-D", "--define", "defines", multiple=True, help="Extra variable as NAME=VALUE")
def dump_cmd(solution_path: str, evaluate_variables: bool, defines: tuple[str, ...]) -> None:
    """Write the loaded solution as JSON to stdout."""
    solution = _load(solution_path, evaluate_variables, _parse_defines(defines))
    click.echo(dumps(solution))


@cli.command("order")
@click.argument("solution_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--references", is_flag=True, help="Also follow <ProjectReference> items")
def order_cmd(solution_path: str, references: bool) -> None:
    """List projects in build order, dependencies first."""
    solution = _load(solution_path)
    graph = DependencyGraph.from_solution(solution, include_references=references)

    try:
        order = graph.build_order()
    except DependencyCycleError as e:
        raise click.ClickException(str(e)) from e

    for project_id in order:
        click.echo(solution.find_project(project_id).name)

    missing = graph.missing_references()
    if missing:
        click.echo(f"Unknown dependencies: {', '.join(missing)}", err=True)


@cli.command("eval")
@click.argument("expression")
@click.option("-D", "--define", "defines", multiple=True, help="Variable as NAME=VALUE")
@click.option("--no-env", is_flag=True, help="Do not fall back to environment variables")
def eval_cmd(expression: str, defines: tuple[str, ...], no_env: bool) -> None:
    """Expand $(Name) references in EXPRESSION."""
    result = evaluate(expression, _parse_defines(defines), read_env=not no_env)
    click.echo(result.value)
    if not result.ok:
        click.echo(f"Unresolved variable: {result.unresolved}", err=True)
        click.get_current_context().exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
