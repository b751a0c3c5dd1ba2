from __future__ import annotations

import argparse
import logging
import sys
import tempfile
from functools import partial
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

if __package__ in {None, ""}:
    # Allow running via ``python splitup/gradio_app.py`` by adding repo root to sys.path
    sys.path.append(str(Path(__file__).resolve().parents[1]))

import gradio as gr
import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
from PIL import Image

from splitup.core.config import AppConfig, load_config
from splitup.core.imaging import ImageDecodeError, load_image, make_thumbnail, placeholder_image
from splitup.core.models import Goal, parse_quantity
from splitup.core.storage import JsonFileStorage
from splitup.core.store import ProjectStore
from splitup.gradio_controller import GradioProjectController

logger = logging.getLogger(__name__)

GOAL_COLUMNS = ["Goal", "Done", "Total", "Remaining", "Completed"]


def build_store(config: AppConfig) -> ProjectStore:
    return ProjectStore(
        JsonFileStorage(Path(config.storage.path).expanduser()),
        slot=config.storage.slot,
        thumbnail_factory=partial(make_thumbnail, size=config.image.thumbnail_size),
    )


def normalize_path(file_like: Any) -> Optional[Path]:
    if file_like is None:
        return None
    if isinstance(file_like, (str, Path)):
        return Path(file_like)
    name = getattr(file_like, "name", None)
    if name:
        return Path(name)
    return None


def append_log(log: str, message: str) -> str:
    lines = [line for line in (log or "").splitlines() if line.strip()]
    lines.append(message)
    if len(lines) > 200:
        lines = lines[-200:]
    return "\n".join(lines)


def goals_frame(goals: Sequence[Goal]) -> pd.DataFrame:
    rows = [[g.text, g.done, g.total, g.remaining, g.completed] for g in goals]
    return pd.DataFrame(rows, columns=GOAL_COLUMNS)


def plot_goal_progress(goals: Sequence[Goal]):
    if not goals:
        return None
    fig, ax = plt.subplots(figsize=(6.5, max(1.6, 0.45 * len(goals) + 0.8)))
    labels = [g.text for g in goals]
    done = [g.done for g in goals]
    remaining = [g.remaining for g in goals]
    ax.barh(labels, done, color="#46b478", label="Done")
    ax.barh(labels, remaining, left=done, color="#c8c8c8", label="Remaining")
    ax.invert_yaxis()
    ax.set_xlabel("Quantity")
    ax.grid(True, axis="x", alpha=0.3)
    ax.legend(loc="lower right")
    fig.tight_layout()
    plt.close(fig)
    return fig


def goal_choices(goals: Sequence[Goal]) -> List[Tuple[str, str]]:
    choices = []
    for goal in goals:
        marker = " ✓" if goal.completed else ""
        choices.append((f"{goal.text} {goal.progress_label}{marker}", goal.id))
    return choices


def gallery_items(controller: GradioProjectController) -> List[Tuple[Image.Image, str]]:
    items = []
    for summary in controller.project_summaries():
        try:
            thumb = load_image(summary.thumbnail)
        except ImageDecodeError:
            thumb = placeholder_image(controller.config.image.thumbnail_size)
        items.append((thumb, summary.name))
    return items


def project_choices(controller: GradioProjectController) -> List[Tuple[str, str]]:
    return [(summary.name, summary.id) for summary in controller.project_summaries()]


def render_view(controller: Optional[GradioProjectController], selected_goal: Optional[str] = None):
    if controller is None:
        canvas = placeholder_image(640)
        return (
            canvas,
            "Total: 0 | Remaining: 0",
            goals_frame([]),
            None,
            gr.update(choices=[], value=None),
            [],
            gr.update(choices=[], value=None),
        )
    payload = controller.snapshot_payload()
    goals = payload["goals"]
    image = payload["image"] or placeholder_image(controller.config.image.canvas_size)
    totals = (
        f"Total: {payload['total']} | Remaining: {payload['remaining']} | "
        f"Grid: {payload['rows']} x {payload['columns']} | Revealed: {payload['revealed']}"
    )
    ids = [goal.id for goal in goals]
    if selected_goal not in ids:
        selected_goal = next((g.id for g in goals if not g.completed), ids[0] if ids else None)
    return (
        image,
        totals,
        goals_frame(goals),
        plot_goal_progress(goals),
        gr.update(choices=goal_choices(goals), value=selected_goal),
        gallery_items(controller),
        gr.update(choices=project_choices(controller), value=None),
    )


def init_controller(config: AppConfig, store: ProjectStore):
    controller = GradioProjectController(store, config)
    log = append_log("", f"Loaded {len(controller.project_summaries())} saved project(s).")
    return (controller, *render_view(controller), log, log, "Ready.")


def upload_image(controller: GradioProjectController, file_like: Any, log: str):
    path = normalize_path(file_like)
    if controller is None or path is None:
        return (*render_view(controller), log, log, "No image selected.")
    try:
        controller.set_image(path.read_bytes())
    except (OSError, ImageDecodeError) as exc:
        return (*render_view(controller), log, log, f"Failed to open image: {exc}")
    log = append_log(log, f"Loaded image: {path.name}")
    return (*render_view(controller), log, log, "Image loaded.")


def set_project_name(controller: GradioProjectController, name: str) -> None:
    if controller is not None:
        controller.set_project_name(name)


def add_goal(controller: GradioProjectController, text: str, number: Any, log: str):
    quantity = parse_quantity(number)
    if controller is None or not (text or "").strip() or quantity is None:
        return (*render_view(controller), log, log, "Enter goal text and a whole, non-negative number.")
    goal = controller.add_goal(text.strip(), quantity)
    log = append_log(log, f"Added goal '{goal.text}' ({goal.total}).")
    return (*render_view(controller, goal.id), log, log, "Goal added.")


def update_goal(controller: GradioProjectController, goal_id: Optional[str], text: str, number: Any, log: str):
    quantity = parse_quantity(number)
    if controller is None or not goal_id:
        return (*render_view(controller), log, log, "Select a goal to update.")
    if not (text or "").strip() or quantity is None:
        return (*render_view(controller, goal_id), log, log, "Enter goal text and a whole, non-negative number.")
    goal = controller.update_goal(goal_id, text.strip(), quantity)
    if goal is None:
        return (*render_view(controller), log, log, "Goal not found.")
    log = append_log(log, f"Updated goal '{goal.text}'.")
    return (*render_view(controller, goal.id), log, log, "Goal updated.")


def divide_image(controller: GradioProjectController, selected_goal: Optional[str], log: str):
    if controller is None:
        return (*render_view(controller), log, log, "Controller not initialized.")
    controller.divide()
    dims = controller.session.dimensions
    log = append_log(log, f"Divided image into {dims.rows} x {dims.columns} grid.")
    return (*render_view(controller, selected_goal), log, log, "Image divided.")


def complete_goal(controller: GradioProjectController, goal_id: Optional[str], amount: Any, log: str):
    if controller is None or not goal_id:
        return (*render_view(controller), log, log, "Select a goal first.")
    value = parse_quantity(amount)
    result = controller.apply_progress(goal_id, value) if value is not None else None
    if result is None:
        return (*render_view(controller, goal_id), log, log, "Amount must be between 1 and the remaining quantity.")
    message = f"'{result.goal.text}' {result.goal.progress_label}: revealed {result.revealed} cell(s)."
    if result.goal.completed:
        message += " Goal complete!"
    log = append_log(log, message)
    return (*render_view(controller, goal_id), log, log, message)


def save_project(controller: GradioProjectController, log: str):
    if controller is None:
        return (*render_view(controller), log, log, "Controller not initialized.")
    try:
        snapshot = controller.save_project()
    except (ValueError, ImageDecodeError) as exc:
        return (*render_view(controller), log, log, str(exc))
    log = append_log(log, f"Saved project '{snapshot.project_name}'.")
    return (*render_view(controller), log, log, "Project saved.")


def reset_project(controller: GradioProjectController, log: str):
    if controller is not None:
        controller.clear()
        log = append_log(log, "Started a new project.")
    return (*render_view(controller), log, log, "Cleared.", "", None)


def open_project(controller: GradioProjectController, project_id: Optional[str], log: str):
    if controller is None or not project_id:
        return (*render_view(controller), log, log, "Select a saved project.", gr.update())
    if not controller.open_project(project_id):
        return (*render_view(controller), log, log, "Project not found.", gr.update())
    name = controller.session.project_name
    log = append_log(log, f"Opened project '{name}'.")
    return (*render_view(controller), log, log, "Project opened.", name)


def delete_project(controller: GradioProjectController, project_id: Optional[str], log: str):
    if controller is None or not project_id:
        return (*render_view(controller), log, log, "Select a saved project.")
    written = controller.delete_project(project_id)
    if written is None:
        status = "Project not found."
    elif written:
        log = append_log(log, "Deleted project.")
        status = "Project deleted."
    else:
        log = append_log(log, "Project removed in memory but could not be written to storage.")
        status = "Project removed in memory only."
    return (*render_view(controller), log, log, status)


def download_goals_csv(controller: GradioProjectController):
    if controller is None or not controller.session.goals:
        return None, "No goals to export."
    df = goals_frame(controller.session.goals)
    with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False) as fp:
        df.to_csv(fp.name, index=False)
        return fp.name, f"Exported {len(df)} goal(s)."


def build_demo(config: Optional[AppConfig] = None) -> gr.Blocks:
    config = config or AppConfig()
    # One store for every browser session so saves never overwrite each other.
    store = build_store(config)
    store.load()
    with gr.Blocks(title="SplitUp") as demo:
        gr.Markdown("## SplitUp")

        controller_state = gr.State()
        log_state = gr.State("")

        with gr.Row():
            with gr.Column(scale=1):
                image_upload = gr.Image(label="Upload Image", type="filepath", sources=["upload"])
                project_name = gr.Textbox(label="Project name", placeholder="Project name")
                with gr.Row():
                    save_btn = gr.Button("Save", variant="primary")
                    delete_btn = gr.Button("Delete")

                gr.Markdown("### Goals")
                goal_text = gr.Textbox(label="Goal", placeholder="Enter text")
                goal_number = gr.Textbox(label="Quantity", placeholder="Enter number")
                with gr.Row():
                    add_btn = gr.Button("Add")
                    update_btn = gr.Button("Update selected")
                    divide_btn = gr.Button("Divide Image")
                goal_select = gr.Dropdown(label="Selected goal", choices=[], value=None)
                with gr.Row():
                    amount = gr.Number(label="Completed amount", value=1, precision=0, minimum=1)
                    complete_btn = gr.Button("Complete")

                gr.Markdown("### Log")
                log_box = gr.Textbox(lines=8, label="Log", interactive=False)
                status_message = gr.Markdown("")
                gr.Markdown(f"[Privacy Policy]({config.privacy_policy_url})")

            with gr.Column(scale=2):
                reveal_image = gr.Image(label="Progress", type="pil", interactive=False)
                totals = gr.Markdown("Total: 0 | Remaining: 0")
                goals_table = gr.Dataframe(headers=GOAL_COLUMNS, interactive=False, label="Goals")
                progress_plot = gr.Plot(label="Goal progress")
                with gr.Row():
                    goals_csv_btn = gr.Button("Export goals CSV")
                    goals_csv = gr.File(label="Goals CSV")

                gr.Markdown("### My Goals")
                gallery = gr.Gallery(label="Saved projects", columns=3, height="auto")
                project_select = gr.Dropdown(label="Saved project", choices=[], value=None)
                with gr.Row():
                    open_btn = gr.Button("Open")
                    remove_btn = gr.Button("Delete saved")

        view_outputs = [reveal_image, totals, goals_table, progress_plot, goal_select, gallery, project_select]
        common_outputs = [*view_outputs, log_state, log_box, status_message]

        demo.load(
            fn=lambda: init_controller(config, store),
            inputs=[],
            outputs=[controller_state, *common_outputs],
        )
        image_upload.upload(
            fn=upload_image,
            inputs=[controller_state, image_upload, log_state],
            outputs=common_outputs,
        )
        project_name.change(fn=set_project_name, inputs=[controller_state, project_name], outputs=[])
        add_btn.click(
            fn=add_goal,
            inputs=[controller_state, goal_text, goal_number, log_state],
            outputs=common_outputs,
        )
        update_btn.click(
            fn=update_goal,
            inputs=[controller_state, goal_select, goal_text, goal_number, log_state],
            outputs=common_outputs,
        )
        divide_btn.click(
            fn=divide_image,
            inputs=[controller_state, goal_select, log_state],
            outputs=common_outputs,
        )
        complete_btn.click(
            fn=complete_goal,
            inputs=[controller_state, goal_select, amount, log_state],
            outputs=common_outputs,
        )
        save_btn.click(fn=save_project, inputs=[controller_state, log_state], outputs=common_outputs)
        delete_btn.click(
            fn=reset_project,
            inputs=[controller_state, log_state],
            outputs=[*common_outputs, project_name, image_upload],
        )
        open_btn.click(
            fn=open_project,
            inputs=[controller_state, project_select, log_state],
            outputs=[*common_outputs, project_name],
        )
        remove_btn.click(
            fn=delete_project,
            inputs=[controller_state, project_select, log_state],
            outputs=common_outputs,
        )
        goals_csv_btn.click(fn=download_goals_csv, inputs=[controller_state], outputs=[goals_csv, status_message])

    return demo


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="SplitUp (Gradio UI)")
    parser.add_argument("--config", type=str, help="Path to a JSON config file overriding the defaults")
    parser.add_argument("--storage", type=str, help="Path of the JSON file holding saved projects")
    parser.add_argument("--seed", type=int, help="Seed for the cell reveal random source")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity (default: INFO)",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(list(argv if argv is not None else sys.argv[1:]))
    logging.basicConfig(
        level=getattr(logging, args.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    config = load_config(Path(args.config).expanduser() if args.config else None)
    if args.storage:
        config.storage.path = args.storage
    if args.seed is not None:
        config.seed = args.seed
    demo = build_demo(config)
    demo.launch()


if __name__ == "__main__":
    main()
