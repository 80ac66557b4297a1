import logging

from flask import Flask, abort, jsonify, redirect, render_template, url_for

import app_runtime
from classes.Errors import ClockError, InvalidDevice
from state import MachineKind


# ----------------------------
# Flask API
# ----------------------------
def create_app(laundry, poll_sec=1):
    app = Flask(__name__)

    def _device_or_404(kind, mid):
        try:
            return laundry.device(kind, mid)
        except InvalidDevice:
            abort(404)

    @app.errorhandler(ClockError)
    def clock_error(e):
        laundry.logger.error(f"Clock error while handling request: {e}")
        return jsonify({"error": "clock unavailable", "detail": str(e)}), 503

    @app.get("/")
    def dashboard():
        # the machine boxes are loaded and refreshed by HTMX
        return render_template(
            "dashboard.html", kinds=list(MachineKind), poll_sec=poll_sec
        )

    @app.get("/partial/machines")
    def partial_machines():
        sections = [
            (kind, [m.current_state() for m in laundry.machines_of(kind)])
            for kind in MachineKind
        ]
        return render_template("_machines_partial.html", sections=sections)

    @app.post("/machines/<kind>/<int:mid>/press")
    def machine_press(kind: str, mid: int):
        laundry.press(_device_or_404(kind, mid))
        return redirect(url_for("dashboard"))

    # JSON API, polled by other front ends
    @app.get("/api/machines")
    def api_machines():
        return jsonify([s.to_dict() for s in laundry.states()])

    @app.get("/api/machines/<kind>/<int:mid>")
    def api_machine(kind: str, mid: int):
        return jsonify(laundry.current_state(_device_or_404(kind, mid)).to_dict())

    @app.post("/api/machines/<kind>/<int:mid>/press")
    def api_machine_press(kind: str, mid: int):
        return jsonify(laundry.press(_device_or_404(kind, mid)).to_dict())

    return app


# ----------------------------
# Main
# ----------------------------
def run_app(app):
    app.run(host="0.0.0.0", port=5000)


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    conf = app_runtime.load_config()
    laundry = app_runtime.init_runtime(conf)
    app = create_app(laundry, poll_sec=laundry.config.poll_seconds)

    laundry.start()
    try:
        run_app(app)
    finally:
        laundry.shutdown()
