#!/usr/bin/env python3
"""
Colonizer CLI

Command-line interface for running the steady-state optimizer on the tour
reference problem and for commanding remote workers.

Usage:
	colonizer run [--cities N] [--population N] [--generations N] [--stagnation N]
	              [--seed S] [--config FILE] [--log-dir DIR] [--threaded]
	colonizer config [--output FILE]
	colonizer remote status THREAD_ID --endpoint HOST:PORT
	colonizer remote abort THREAD_ID --endpoint HOST:PORT
	colonizer remote dispose THREAD_ID --endpoint HOST:PORT
"""

import logging
import uuid
from dataclasses import replace
from typing import Callable, Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from colonizer.hosting import (
	ComputationThreadDispatcher,
	OptimizationResult,
	OptimizationTask,
	StoppingCondition,
	TaskContext,
	ThreadState,
)
from colonizer.logger import OptimizationLogger, create_logger
from colonizer.population import Population, PopulationConfig
from colonizer.problems import TourProblem
from colonizer.transport import get_worker_proxy

# Create Typer apps
app = typer.Typer(
	name="colonizer",
	help="Colonizer - steady-state evolutionary optimizer",
	no_args_is_help=True,
)
remote_app = typer.Typer(help="Remote worker commands")
app.add_typer(remote_app, name="remote")

console = Console()

POLL_INTERVAL = 0.2


def state_color(state: str) -> str:
	"""Get color for a thread state."""
	colors = {
		"idle": "yellow",
		"running": "blue",
		"completed": "green",
		"aborted": "dim",
		"failed": "red",
		"dead": "red",
	}
	return colors.get(state.lower(), "white")


def load_config(config_file: Optional[str], population: Optional[int]) -> PopulationConfig:
	"""Population config from file (or defaults) with command-line overrides."""
	config = PopulationConfig.load_yaml(config_file) if config_file else PopulationConfig()
	if population is not None:
		config = replace(config, population_size=population)
	return config


def parse_thread_id(value: str) -> uuid.UUID:
	try:
		return uuid.UUID(value)
	except ValueError:
		rprint(f"[red]Invalid thread id: {value}[/red]")
		raise typer.Exit(1)


def print_result(result: OptimizationResult, title: str = "Result") -> None:
	table = Table(title=title)
	table.add_column("Metric", style="cyan")
	table.add_column("Value", justify="right")
	table.add_row("Stop reason", result.stop_reason.name)
	table.add_row("Iterations", str(result.iterations_run))
	table.add_row("Initial best", str(result.initial_fitness))
	table.add_row("Final best", f"[green]{result.final_fitness}[/green]")
	table.add_row("Improvement", f"{result.improvement_percent:.2f}%")
	table.add_row("Cataclysms", str(result.cataclysms))
	table.add_row("Elapsed", f"{result.elapsed_seconds:.2f}s")
	console.print(table)


def run_threaded(task: OptimizationTask, log: Callable[[str], None], verbose: bool = False) -> OptimizationResult:
	"""Drive the task through a dispatcher, polling its thread until it stops."""
	dispatcher_logger = OptimizationLogger("Dispatcher", file_logger=log)
	if verbose:
		dispatcher_logger.set_level(logging.DEBUG)
	dispatcher = ComputationThreadDispatcher(capacity=1, logger=dispatcher_logger)
	thread_id = dispatcher.new_thread()
	response = dispatcher.run_computation(thread_id, task)
	if not response.success:
		rprint(f"[red]Could not start computation: {response.details}[/red]")
		raise typer.Exit(1)

	thread = dispatcher.get_thread(thread_id)
	last_info = ""
	try:
		while not thread.join(timeout=POLL_INTERVAL):
			info = dispatcher.get_thread_info(thread_id)
			if info.additional_info and info.additional_info != last_info:
				log(f"[Thread] {info.additional_info}")
				last_info = info.additional_info
	except KeyboardInterrupt:
		rprint("[yellow]Interrupted, aborting...[/yellow]")
		dispatcher.abort_thread_action(thread_id)
		thread.join()

	info = dispatcher.get_thread_info(thread_id)
	dispatcher.dispose_thread(thread_id)
	if info.state == ThreadState.FAILED:
		rprint(f"[red]Computation failed: {info.additional_info}[/red]")
		raise typer.Exit(1)
	return thread.result


# =============================================================================
# Optimizer commands
# =============================================================================

@app.command("run")
def run(
	cities: int = typer.Option(30, "--cities", "-c", help="Number of cities"),
	population: Optional[int] = typer.Option(None, "--population", "-p", help="Population size (overrides config)"),
	generations: int = typer.Option(2000, "--generations", "-g", help="Max generations"),
	stagnation: Optional[int] = typer.Option(None, "--stagnation", "-s", help="Stop after N generations without improvement"),
	seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
	config_file: Optional[str] = typer.Option(None, "--config", help="PopulationConfig YAML file"),
	log_dir: Optional[str] = typer.Option(None, "--log-dir", help="Write a dated log file under this directory"),
	threaded: bool = typer.Option(False, "--threaded", help="Run through the thread dispatcher"),
	report_interval: int = typer.Option(100, "--report-interval", help="Generations between progress lines"),
	verbose: bool = typer.Option(False, "--verbose", "-v", help="Log best-fitness changes"),
):
	"""Optimize a random tour."""
	try:
		config = load_config(config_file, population)
		stopping = StoppingCondition(max_iterations=generations, max_iterations_without_improvement=stagnation)
		problem = TourProblem(num_cities=cities, seed=seed)
	except (OSError, ValueError) as e:
		rprint(f"[red]Error: {e}[/red]")
		raise typer.Exit(1)

	logger = create_logger("colonizer", log_dir=log_dir) if log_dir else None
	log = logger or typer.echo

	try:
		pop = Population(problem.factory, config, seed=seed, verbose=verbose, logger=log)
		task = OptimizationTask(pop, stopping, report_interval=report_interval, verbose=True, logger=log)
		log(f"[Run] {problem}, {pop}")

		if threaded:
			result = run_threaded(task, log, verbose=verbose)
		else:
			try:
				result = task.run(TaskContext())
			except KeyboardInterrupt:
				rprint("[yellow]Interrupted[/yellow]")
				raise typer.Exit(1)

		print_result(result, title=f"Tour ({cities} cities)")
		if logger:
			logger.header("Results")
			logger(f"Stop reason: {result.stop_reason.name}")
			logger(f"Iterations: {result.iterations_run}, cataclysms: {result.cataclysms}")
			logger(f"Best: {result.initial_fitness} -> {result.final_fitness} ({result.improvement_percent:.2f}%)")
			logger(f"Best tour: {result.best.order}")
			logger.separator()
			rprint(f"[dim]Log written to {logger.log_file}[/dim]")
	finally:
		if logger:
			logger.close()


@app.command("config")
def config_cmd(
	output: Optional[str] = typer.Option(None, "--output", "-o", help="Save to this YAML file"),
):
	"""Print (or save) the default population configuration."""
	config = PopulationConfig()
	if output:
		config.save_yaml(output)
		rprint(f"[green]Saved config to {output}[/green]")
	else:
		typer.echo(config.to_yaml())


# =============================================================================
# Remote commands
# =============================================================================

ENDPOINT_OPTION = typer.Option("localhost:8080", "--endpoint", "-e", help="Worker endpoint host:port")


@remote_app.command("status")
def remote_status(
	thread_id: str = typer.Argument(..., help="Thread id"),
	endpoint: str = ENDPOINT_OPTION,
):
	"""Show a remote thread's state."""
	tid = parse_thread_id(thread_id)
	try:
		info = get_worker_proxy(endpoint).get_thread_info(tid)
	except (ConnectionError, ValueError) as e:
		rprint(f"[red]Error: {e}[/red]")
		raise typer.Exit(1)

	color = state_color(info.state.value)
	table = Table(title=f"Thread {info.thread_id}")
	table.add_column("Field", style="cyan")
	table.add_column("Value")
	table.add_row("State", f"[{color}]{info.state.value}[/{color}]")
	table.add_row("Accepts commands", "yes" if info.accepts_commands else "no")
	table.add_row("Info", info.additional_info or "-")
	console.print(table)


def _remote_command(action: str, thread_id: str, endpoint: str) -> None:
	tid = parse_thread_id(thread_id)
	try:
		client = get_worker_proxy(endpoint)
		response = client.abort_thread_action(tid) if action == "abort" else client.dispose_thread(tid)
	except (ConnectionError, ValueError) as e:
		rprint(f"[red]Error: {e}[/red]")
		raise typer.Exit(1)

	if not response.success:
		rprint(f"[red]{action.capitalize()} failed: {response.details}[/red]")
		raise typer.Exit(1)
	rprint(f"[green]{action.capitalize()} sent to {tid}[/green]")


@remote_app.command("abort")
def remote_abort(
	thread_id: str = typer.Argument(..., help="Thread id"),
	endpoint: str = ENDPOINT_OPTION,
):
	"""Abort a remote thread's current computation."""
	_remote_command("abort", thread_id, endpoint)


@remote_app.command("dispose")
def remote_dispose(
	thread_id: str = typer.Argument(..., help="Thread id"),
	endpoint: str = ENDPOINT_OPTION,
):
	"""Abort and remove a remote thread."""
	_remote_command("dispose", thread_id, endpoint)


def main():
	"""Entry point."""
	app()


if __name__ == "__main__":
	main()
