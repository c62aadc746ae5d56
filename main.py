#!/usr/bin/env python3
"""
ragsynth - Synthetic test data generation for RAG evaluation
"""

import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import List

import click
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ragsynth.dataset import EvaluationDataset
from ragsynth.exceptions import RagSynthError
from ragsynth.graph import KnowledgeGraph, graph
from ragsynth.ingestion import DocumentProcessor
from ragsynth.models import LLMManager, create_embedding_model
from ragsynth.persona import Persona, generate_personas
from ragsynth.splitters import create_splitter
from ragsynth.synthesizer import create_synthesizer, synthesize
from ragsynth.transforms import chunk, embed, embed_property, relationship, summarize, tap, transform

logger = logging.getLogger(__name__)

console = Console()

DEFAULT_SYNTHESIZERS = {
    "single-hop-specific": 50,
    "multi-hop-abstract": 25,
    "multi-hop-specific": 25,
}


def load_env_file():
    """Load environment variables from .env file if it exists."""
    env_file = Path(".env")
    if env_file.exists():
        with open(env_file, 'r') as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#') and '=' in line:
                    key, value = line.split('=', 1)
                    os.environ.setdefault(key.strip(), value.strip())


def load_config(config_path: str = "config/config.yaml") -> dict:
    """Load configuration from YAML file."""
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
        return config or {}
    except FileNotFoundError:
        console.print(f"[red]Configuration file not found: {config_path}[/red]")
        sys.exit(1)
    except yaml.YAMLError as e:
        console.print(f"[red]Error parsing configuration file: {e}[/red]")
        sys.exit(1)


def setup_logging(config: dict, debug: bool = False):
    """Setup logging configuration."""
    log_config = config.get("logging", {})
    log_level = logging.DEBUG if debug else getattr(logging, log_config.get("level", "INFO"))
    log_format = log_config.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Create logs directory if it doesn't exist
    log_file = log_config.get("file", "logs/ragsynth.log")
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )


def load_personas(path: str) -> List[Persona]:
    with open(path, 'r', encoding='utf-8') as f:
        return [Persona.from_dict(item) for item in json.load(f)]


def display_stats(kg: KnowledgeGraph, title: str = "Knowledge Graph Statistics"):
    """Display graph statistics in a formatted table."""
    stats = kg.get_stats()

    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Total Nodes", str(stats["total_nodes"]))
    table.add_row("Total Relationships", str(stats["total_relationships"]))
    for node_type, count in sorted(stats["node_types"].items()):
        table.add_row(f"Nodes: {node_type}", str(count))
    for rel_type, count in sorted(stats["relationship_types"].items()):
        table.add_row(f"Relationships: {rel_type}", str(count))

    console.print(table)


def display_samples(dataset: EvaluationDataset, limit: int = 5):
    """Display the first few generated samples."""
    table = Table(title=f"Generated Samples (showing {min(limit, len(dataset))} of {len(dataset)})")
    table.add_column("Persona", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Question", style="white")

    for sample in dataset.slice(0, limit):
        table.add_row(
            sample.metadata.get("persona", ""),
            sample.metadata.get("query_type", ""),
            sample.query,
        )

    console.print(table)


@click.group()
@click.option('--config', '-c', default='config/config.yaml', help='Configuration file path')
@click.option('--debug', '-d', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config, debug):
    """Synthetic test data generation for RAG evaluation."""
    # Load environment variables first
    load_env_file()

    ctx.ensure_object(dict)
    ctx.obj['config'] = load_config(config)
    ctx.obj['debug'] = debug

    setup_logging(ctx.obj['config'], debug)


@cli.command('build-graph')
@click.argument('data_path', type=click.Path(exists=True))
@click.option('--output', '-o', default='data/graph.json', help='Where to save the knowledge graph')
@click.pass_context
def build_graph(ctx, data_path, output):
    """Load documents and build an enriched knowledge graph."""
    config = ctx.obj['config']
    transform_config = config.get("transforms", {})

    documents = DocumentProcessor(config.get("ingestion", {})).load_documents(data_path)
    if not documents:
        console.print("[yellow]No documents found.[/yellow]")
        return

    async def run_build():
        llm = LLMManager(config)
        embedding_model = create_embedding_model(config)
        splitter = create_splitter(config)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console
        ) as progress:
            task = progress.add_task("Building knowledge graph...", total=None)

            def report(step: str):
                return tap(lambda kg: progress.update(task, description=f"{step} ({len(kg)} nodes)"))

            kg = await (
                transform(graph(documents))
                .pipe(chunk(splitter))
                .pipe(report("Chunked"))
                .pipe(embed(embedding_model))
                .pipe(report("Embedded"))
                .pipe(summarize(llm, concurrency=transform_config.get("summarize_concurrency", 10)))
                .pipe(report("Summarized"))
                .pipe(embed_property(embedding_model, embed_property="summary", property_name="summary_embedding"))
                .pipe(relationship(threshold=transform_config.get("relationship_threshold", 0.7)))
                .apply()
            )
            progress.update(task, description="Knowledge graph complete")

        return kg

    try:
        kg = asyncio.run(run_build())
    except RagSynthError as e:
        console.print(f"[red]Error building graph: {e}[/red]")
        sys.exit(1)

    kg.save(output)
    display_stats(kg)
    console.print(f"[green]Saved knowledge graph to {output}[/green]")


@cli.command()
@click.argument('graph_path', type=click.Path(exists=True))
@click.option('--count', '-n', type=int, default=None, help='Number of personas (default: one per cluster)')
@click.option('--output', '-o', default='data/personas.json', help='Where to save the personas')
@click.pass_context
def personas(ctx, graph_path, count, output):
    """Generate personas from a knowledge graph."""
    config = ctx.obj['config']
    persona_config = config.get("persona", {})

    async def run_personas():
        llm = LLMManager(config)
        return await generate_personas(
            KnowledgeGraph.load(graph_path),
            llm,
            count=count if count is not None else persona_config.get("count"),
            concurrency=persona_config.get("concurrency", 5),
            similarity_threshold=persona_config.get("similarity_threshold", 0.75),
        )

    try:
        result = asyncio.run(run_personas())
    except RagSynthError as e:
        console.print(f"[red]Error generating personas: {e}[/red]")
        sys.exit(1)

    Path(output).parent.mkdir(parents=True, exist_ok=True)
    with open(output, 'w', encoding='utf-8') as f:
        json.dump([p.to_dict() for p in result], f, indent=2, ensure_ascii=False)

    for p in result:
        console.print(Panel(p.description, title=f"[bold blue]{p.name}[/bold blue]", border_style="blue"))
    console.print(f"[green]Saved {len(result)} personas to {output}[/green]")


@cli.command()
@click.argument('graph_path', type=click.Path(exists=True))
@click.option('--count', '-n', type=int, default=10, help='Number of samples to generate')
@click.option('--output', '-o', default='data/samples.jsonl', help='Where to save the samples (.jsonl or .json)')
@click.option('--personas', 'personas_path', type=click.Path(exists=True), help='Personas JSON file to reuse')
@click.option('--no-ground-truth', is_flag=True, help='Skip reference answer generation')
@click.pass_context
def generate(ctx, graph_path, count, output, personas_path, no_ground_truth):
    """Synthesize evaluation samples from a knowledge graph."""
    config = ctx.obj['config']
    persona_config = config.get("persona", {})
    synthesis_config = config.get("synthesis", {})

    async def run_generate():
        llm = LLMManager(config)
        kg = KnowledgeGraph.load(graph_path)

        if personas_path:
            persona_list = load_personas(personas_path)
        else:
            persona_list = await generate_personas(
                kg,
                llm,
                count=persona_config.get("count"),
                concurrency=persona_config.get("concurrency", 5),
                similarity_threshold=persona_config.get("similarity_threshold", 0.75),
            )

        weights = synthesis_config.get("synthesizers") or DEFAULT_SYNTHESIZERS
        synthesizers = [(create_synthesizer(llm, kind), weight) for kind, weight in weights.items()]

        return await synthesize(
            kg,
            synthesizers,
            persona_list,
            count,
            {
                "concurrency": synthesis_config.get("concurrency", 5),
                "generate_ground_truth": (
                    not no_ground_truth and synthesis_config.get("generate_ground_truth", True)
                ),
                "scenario": synthesis_config.get("scenario"),
            },
        )

    try:
        dataset = asyncio.run(run_generate())
    except RagSynthError as e:
        console.print(f"[red]Error generating samples: {e}[/red]")
        sys.exit(1)

    dataset.save(output)
    display_samples(dataset)
    console.print(f"[green]Saved {len(dataset)} samples to {output}[/green]")


@cli.command()
@click.argument('graph_path', type=click.Path(exists=True))
def stats(graph_path):
    """Show knowledge graph statistics."""
    try:
        kg = KnowledgeGraph.load(graph_path)
    except RagSynthError as e:
        console.print(f"[red]Error loading graph: {e}[/red]")
        sys.exit(1)
    display_stats(kg)


if __name__ == '__main__':
    cli()
