# app.py
import logging
from decimal import Decimal
from functools import wraps

from flask import Flask, jsonify, make_response, request
from flask.json.provider import DefaultJSONProvider
from flask_caching import Cache

import config
from domain.exceptions import PosError
from services.context import build_context, build_repository

logger = logging.getLogger(__name__)

PRODUCTS_CACHE_KEY = '/api/products'
REPORT_CACHE_PREFIX = '/api/report'


class DecimalJSONProvider(DefaultJSONProvider):
    """Los importes Decimal salen como números JSON, conservando el orden de las claves."""

    sort_keys = False

    @staticmethod
    def default(obj):
        if isinstance(obj, Decimal):
            return float(obj)
        return DefaultJSONProvider.default(obj)


def default_config():
    settings = {
        "CACHE_TYPE": config.CACHE_TYPE,
        "CACHE_DEFAULT_TIMEOUT": config.CACHE_DEFAULT_TIMEOUT,
        "ASSETS_DIR": config.ASSETS_DIR,
        "CORS_ORIGIN": config.CORS_ORIGIN,
        "STORE_BACKEND": config.STORE_BACKEND,
        "DATA_DIR": config.DATA_DIR,
        "DB_NAME": config.DB_NAME,
        "DB_TIMEOUT": config.DB_TIMEOUT,
        "TRANSACTION_TIMEOUT": config.TRANSACTION_TIMEOUT,
    }
    if config.CACHE_TYPE == "RedisCache":
        settings.update({
            "CACHE_REDIS_HOST": config.CACHE_HOST,
            "CACHE_REDIS_PORT": config.CACHE_PORT,
            "CACHE_REDIS_DB": config.CACHE_DB,
        })
    return settings


def cache_control_header(cache, key, timeout=None):
    """
    Cachea la respuesta JSON del endpoint y marca X-Cache HIT/MISS.

    `key` puede ser un texto fijo o una función; la función se evalúa en cada
    request, antes de calcular la respuesta, para versionar la entrada.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            cache_key = key() if callable(key) else key
            cached_response = cache.get(cache_key)

            if cached_response is not None:
                response = make_response(cached_response)
                response.headers['Content-Type'] = 'application/json'
                response.headers['X-Cache'] = 'HIT'
                return response

            response = make_response(f(*args, **kwargs))
            response.headers['X-Cache'] = 'MISS'
            if response.status_code == 200:
                cache.set(cache_key, response.get_data(), timeout=timeout)
            return response

        return decorated_function

    return decorator


def create_app(context=None, settings=None):
    """
    Crea la aplicación Flask.

    Si no se entrega un contexto se construye con el repositorio configurado;
    un error de carga (DataLoadError) se propaga y el servicio no arranca.
    """
    app_config = default_config()
    app_config.update(settings or {})

    app = Flask(__name__, static_folder=app_config["ASSETS_DIR"], static_url_path='/assets')
    app.config.from_mapping(app_config)
    app.json = DecimalJSONProvider(app)
    cache = Cache(app)

    # Dependencia: inyección del repositorio en los servicios
    if context is None:
        repository = build_repository(
            backend=app.config["STORE_BACKEND"],
            data_dir=app.config["DATA_DIR"],
            db_name=app.config["DB_NAME"],
            timeout=app.config["DB_TIMEOUT"],
        )
        context = build_context(repository, transaction_timeout=app.config["TRANSACTION_TIMEOUT"])
    app.extensions['pos_context'] = context

    @app.after_request
    def add_cors_headers(response):
        response.headers['Access-Control-Allow-Origin'] = app.config["CORS_ORIGIN"]
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type,Authorization'
        response.headers['Access-Control-Allow-Methods'] = 'GET,POST,OPTIONS'
        return response

    @app.errorhandler(PosError)
    def handle_pos_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.route('/api/products', methods=['GET'])
    @cache_control_header(cache, PRODUCTS_CACHE_KEY)
    def get_products():
        """Endpoint para listar el catálogo completo."""
        products = context.products.list_products()
        return jsonify([p.to_dict() for p in products])

    @app.route('/api/sale', methods=['POST'])
    def post_sale():
        """Endpoint de checkout."""
        data = request.get_json(silent=True)
        cart = data.get('cartItems') if isinstance(data, dict) else None

        sale = context.checkout.process(cart)
        return jsonify({"message": "Sale recorded", "profit": sale.profit})

    def report_cache_key():
        # Versionado por largo del journal: una venta nueva nunca lee un reporte anterior
        return f"{REPORT_CACHE_PREFIX}@{len(context.journal)}"

    @app.route('/api/report', methods=['GET'])
    @cache_control_header(cache, report_cache_key)
    def get_report():
        """Endpoint para el resumen de ventas."""
        return jsonify(context.reports.summarize().to_dict())

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'})

    return app


if __name__ == '__main__':
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app()
    logger.info(f"🚀 Servidor corriendo en http://localhost:{config.PORT}")
    app.run(host=config.HOST, port=config.PORT, debug=False, threaded=True)
