"""
LH2 AOP Dashboard - API Server
Flask app serving the persisted plan and its month-by-month projections.
"""

import io
import logging
import os

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
LOG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'app.log')
_log_handlers = [logging.StreamHandler()]
# No log file when DB_HOST points at a managed Postgres; those hosts log to stdout
if not os.getenv('DB_HOST'):
    try:
        _log_handlers.append(logging.FileHandler(LOG_PATH, encoding='utf-8'))
    except OSError:
        pass
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
    handlers=_log_handlers,
)
log = logging.getLogger('lh2')

from dotenv import load_dotenv
load_dotenv()

from flask import Flask, jsonify, request, send_file

import db
import validator
from export import export_projection_excel
from plan import CATEGORIES, PlanState, add_brand, remove_brand
from portfolio import rollup
from projection import project_plan

app = Flask(__name__)
app.secret_key = os.getenv('FLASK_SECRET_KEY', os.urandom(24).hex())
app.config['MAX_CONTENT_LENGTH'] = 10 * 1024 * 1024  # 10 MB

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

_db_ok = db.init_db()
if not _db_ok:
    log.warning("Running without a state store; /api/state will fail")


@app.errorhandler(500)
def _internal_error(e):
    log.error("500 Internal Server Error: %s %s - %s", request.method, request.path, e)
    if request.path.startswith('/api/'):
        return jsonify(success=False, error='Internal server error', message=str(e)), 500
    return '<h1>Internal Server Error</h1>', 500


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _json_body():
    """Parsed JSON object body, or None when the body is missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def _projection_payload(blob: dict, digits: int = 0) -> dict:
    plan = PlanState.from_dict(blob)
    projections = project_plan(plan)
    result = rollup(projections, plan.overhead)
    issues = validator.run_all_checks(plan, blob)
    brands = {c: {} for c in CATEGORIES}
    for (kind, name), bp in projections.items():
        brands[kind][name] = bp.to_dict(digits)
    return {
        'brands': brands,
        'rollup': result.to_dict(digits),
        'issues': issues.to_dict(),
    }


def _summary_line(blob: dict) -> str:
    plan = PlanState.from_dict(blob)
    counts = {c: len(plan.brands_of(c)) for c in CATEGORIES}
    return ', '.join(f'{n} {c} brands' for c, n in counts.items())


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.route('/health')
def health():
    return 'OK', 200


@app.route('/api/state', methods=['GET'])
def api_get_state():
    """Load the persisted plan blob."""
    try:
        return jsonify(success=True, data=db.load_state())
    except Exception as e:
        log.error("GET /api/state error: %s", e)
        return jsonify(success=False, error=str(e)), 500


@app.route('/api/state', methods=['POST'])
def api_save_state():
    """Persist the posted plan blob."""
    data = _json_body()
    if data is None:
        return jsonify(success=False, error='Expected a JSON object'), 400
    try:
        last_updated = db.save_state(data)
        return jsonify(success=True, message='State saved', lastUpdated=last_updated)
    except Exception as e:
        log.error("POST /api/state error: %s", e)
        return jsonify(success=False, error=str(e)), 500


@app.route('/api/reset', methods=['POST'])
def api_reset():
    try:
        db.reset_state()
        return jsonify(success=True, message='State reset to defaults')
    except Exception as e:
        log.error("POST /api/reset error: %s", e)
        return jsonify(success=False, error=str(e)), 500


@app.route('/api/projection', methods=['GET', 'POST'])
def api_projection():
    """Projection of the stored plan (GET) or of a posted what-if blob (POST, not saved)."""
    if request.method == 'POST':
        blob = _json_body()
        if blob is None:
            return jsonify(success=False, error='Expected a JSON object'), 400
    else:
        blob = None
    try:
        if blob is None:
            blob = db.load_state()
        return jsonify(success=True, data=_projection_payload(blob))
    except Exception as e:
        log.error("%s /api/projection error: %s", request.method, e, exc_info=True)
        return jsonify(success=False, error=str(e)), 500


@app.route('/api/validate')
def api_validate():
    try:
        blob = db.load_state()
        result = validator.run_all_checks(PlanState.from_dict(blob), blob)
        return jsonify(success=True, data=result.to_dict())
    except Exception as e:
        log.error("GET /api/validate error: %s", e)
        return jsonify(success=False, error=str(e)), 500


@app.route('/api/brands', methods=['POST'])
def api_add_brand():
    """Add a brand from the creation-wizard form.
    POST JSON: {brandType: 'syndication'|'discover', brandName, ...form fields}
    """
    data = _json_body()
    if data is None:
        return jsonify(success=False, error='Expected a JSON object'), 400
    brand_type = data.pop('brandType', '')
    try:
        plan = add_brand(PlanState.from_dict(db.load_state()), brand_type, data)
    except ValueError as e:
        return jsonify(success=False, error=str(e)), 400
    try:
        blob = plan.to_dict()
        blob['updatedBy'] = 'user'
        last_updated = db.save_state(blob)
        log.info("Added %s brand %s", brand_type, str(data.get('brandName', '')).strip())
        return jsonify(success=True, message='Brand added', lastUpdated=last_updated)
    except Exception as e:
        log.error("POST /api/brands error: %s", e)
        return jsonify(success=False, error=str(e)), 500


@app.route('/api/brands/<kind>/<name>', methods=['DELETE'])
def api_remove_brand(kind, name):
    try:
        plan = remove_brand(PlanState.from_dict(db.load_state()), kind, name)
    except KeyError:
        return jsonify(success=False, error=f'Unknown {kind} brand: {name}'), 404
    try:
        blob = plan.to_dict()
        blob['updatedBy'] = 'user'
        last_updated = db.save_state(blob)
        log.info("Removed %s brand %s", kind, name)
        return jsonify(success=True, message='Brand removed', lastUpdated=last_updated)
    except Exception as e:
        log.error("DELETE /api/brands/%s error: %s", name, e)
        return jsonify(success=False, error=str(e)), 500


@app.route('/api/export')
def api_export():
    """Download the current projection as an Excel workbook."""
    try:
        plan = PlanState.from_dict(db.load_state())
        projections = project_plan(plan)
        result = rollup(projections, plan.overhead)
        buf = io.BytesIO()
        export_projection_excel(plan, projections, result, buf)
        buf.seek(0)
        return send_file(buf, as_attachment=True,
                         download_name='LH2_AOP_Projection.xlsx',
                         mimetype=XLSX_MIMETYPE)
    except Exception as e:
        log.error("GET /api/export failed: %s", e, exc_info=True)
        return jsonify(success=False, error=str(e)), 500


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 3001))
    host = os.environ.get('HOST', '0.0.0.0')
    log.info("LH2 AOP Dashboard server starting on http://%s:%s (%s store)", host, port, db.backend())
    if _db_ok:
        log.info("Loaded: %s", _summary_line(db.load_state()))
    app.run(host=host, port=port, debug=False)
