"""HTTP API over the ingestion parser (Flask).

Endpoints:
  GET  /health            - liveness probe
  POST /api/parse         - multipart 'file' or JSON {file_base64, filename, password}
  POST /api/parse/manual  - JSON {rows, header_row_index, column_mapping}
"""
import base64
import binascii
import logging
from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request
from werkzeug.utils import secure_filename

from .errors import IncorrectPassword, PasswordRequired, StatementIngestError, UnsupportedSourceFormat
from .exporters import result_to_dict
from .extractor import parse_source, parse_with_mapping
from .log_setup import setup_logging
from .models import HeaderDetectionFailed, NoTransactionsParsed, mapping_from_dict
from .settings import Settings, load_settings

logger = logging.getLogger(__name__)


def _result_response(result):
    body = result_to_dict(result)
    if isinstance(result, (HeaderDetectionFailed, NoTransactionsParsed)):
        return jsonify(body), 422
    return jsonify(body), 200


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or load_settings()
    setup_logging(settings.log_dir, settings.log_level)

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = settings.max_content_length
    app.config['ALLOWED_EXTENSIONS'] = settings.allowed_extensions

    def allowed_file(filename: str) -> bool:
        return '.' in filename and \
               filename.rsplit('.', 1)[1].lower() in app.config['ALLOWED_EXTENSIONS']

    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'timestamp': datetime.utcnow().isoformat(),
            'service': 'Statement Ingest',
        }), 200

    @app.route('/api/parse', methods=['POST'])
    def api_parse():
        """Parse an uploaded statement and return normalized transactions."""
        if 'file' in request.files:
            uploaded = request.files['file']
            if uploaded.filename == '':
                return jsonify({'error': 'No file provided'}), 400
            filename = secure_filename(uploaded.filename)
            if not allowed_file(filename):
                return jsonify({'error': f'File type not allowed: {filename}'}), 400
            data = uploaded.read()
            password = request.form.get('password') or None
        elif request.is_json:
            payload = request.get_json(silent=True) or {}
            file_b64 = payload.get('file_base64')
            if not file_b64:
                return jsonify({'error': 'file_base64 is required in JSON body'}), 400
            try:
                data = base64.b64decode(file_b64, validate=True)
            except (binascii.Error, ValueError):
                return jsonify({'error': 'file_base64 is not valid base64'}), 400
            filename = secure_filename(payload.get('filename') or 'statement')
            password = payload.get('password') or None
        else:
            return jsonify({'error': 'No file provided. Send multipart/form-data with file or JSON with file_base64'}), 400

        try:
            result = parse_source(data, filename=filename, password=password, debug=app.debug)
        except PasswordRequired as e:
            return jsonify({'status': 'password_required', 'error': str(e)}), 401
        except IncorrectPassword as e:
            return jsonify({'status': 'incorrect_password', 'error': str(e)}), 401
        except UnsupportedSourceFormat as e:
            return jsonify({'status': 'unsupported_format', 'error': str(e)}), 415
        except StatementIngestError as e:
            logger.error(f"API parse error for {filename}: {e}", exc_info=True)
            return jsonify({'error': str(e)}), 422
        except Exception:
            logger.error(f"Caught unexpected exception while parsing {filename}", exc_info=True)
            return jsonify({'error': 'An unexpected error occurred while parsing the statement'}), 500

        return _result_response(result)

    @app.route('/api/parse/manual', methods=['POST'])
    def api_parse_manual():
        """Re-run parsing on preview rows with a user-supplied column mapping."""
        payload = request.get_json(silent=True) or {}
        rows = payload.get('rows')
        if not isinstance(rows, list) or not all(isinstance(r, list) for r in rows):
            return jsonify({'error': 'rows must be a list of lists'}), 400
        try:
            mapping = mapping_from_dict(payload.get('column_mapping') or {})
            header_row_index = int(payload.get('header_row_index', 0))
            matrix = tuple(tuple('' if c is None else str(c) for c in row) for row in rows)
            result = parse_with_mapping(matrix, header_row_index, mapping, debug=app.debug)
        except (TypeError, ValueError) as e:
            return jsonify({'error': str(e)}), 400
        return _result_response(result)

    @app.errorhandler(413)
    def request_entity_too_large(error):
        return jsonify({'error': f'File too large. Maximum file size is {settings.max_upload_mb}MB.'}), 413

    return app
