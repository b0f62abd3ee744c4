import logging
import traceback

from flask import Blueprint, request, jsonify, current_app

from extensions import limiter
from models.analysis import AnalysisRequest
from utils.security import get_json_string, get_json_text

coach_bp = Blueprint('coach', __name__)

debug_logger = logging.getLogger('debug_logger')


def _coach_service():
    return current_app.extensions.get('coach_service')


@coach_bp.route('/health')
@limiter.exempt
def health():
    return jsonify({
        'status': 'healthy',
        'gemini_configured': _coach_service() is not None,
    })


@coach_bp.route('/upload', methods=['POST'])
def upload_video():
    current_app.logger.info('Upload received')

    file = request.files.get('video')
    if not file or not file.filename:
        return jsonify({'message': 'No video uploaded'}), 400

    storage = current_app.extensions['scratch_storage']
    path = storage.save_upload(file)

    return jsonify({'success': True, 'path': path})


@coach_bp.route('/analyze', methods=['POST'])
def analyze_video():
    data = request.get_json(silent=True)
    uploaded_path = get_json_string(data, 'path').strip()
    perspective = get_json_text(data, 'perspective')

    if not uploaded_path:
        return jsonify({'message': 'No video path provided'}), 400
    if not perspective:
        return jsonify({'message': 'No perspective provided'}), 400

    storage = current_app.extensions['scratch_storage']
    if not storage.is_upload_path(uploaded_path):
        current_app.logger.warning(f"Rejected video path outside upload dir: {uploaded_path}")
        return jsonify({'message': 'Invalid video path'}), 400

    service = _coach_service()
    if service is None:
        return jsonify({'message': 'Gemini API key not configured'}), 500

    try:
        feedback = service.analyze(AnalysisRequest(uploaded_path=uploaded_path, perspective=perspective))
    except Exception as e:
        debug_logger.error(f"ANALYZE ERROR: {e}")
        debug_logger.error(traceback.format_exc())
        current_app.logger.error(f"Analysis failed for {uploaded_path}: {e}")
        return jsonify({'message': 'Analysis failed'}), 500

    return jsonify({'success': True, 'feedback': feedback})
