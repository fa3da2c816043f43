import logging

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest

from .helpers import make_status, not_found_status, parse_ttl
from .models import DeserializationError, LookupStatus, SerializationError
from .store.interface import KeyValueStore

log = logging.getLogger("micro-kv")


def create_routes(settings, datastore: KeyValueStore):
    bp = Blueprint("kv", __name__)

    @bp.route("/health", methods=["GET"])
    def health():
        return {"status": "healthy", "backend": type(datastore).__name__}, 200

    @bp.route("/", methods=["GET"])
    def get_all():
        entries = datastore.get_all()
        return jsonify(
            {key: {"value": value, "ttl": ttl} for key, (value, ttl) in entries.items()}
        )

    @bp.route("/ttl/<key>", methods=["GET"])
    def get_ttl(key):
        lookup = datastore.get_ttl(key)
        if not lookup.found:
            return jsonify(not_found_status(key)), 404
        return jsonify({"ttl": lookup.ttl, "status": "success"})

    @bp.route("/<key>", methods=["GET"])
    def get(key):
        try:
            lookup = datastore.get(key)
        except DeserializationError as e:
            log.error("Error deserializing JSON for key=%s: %s", key, e)
            return jsonify(make_status("Error deserializing JSON")), 500

        if lookup.status is LookupStatus.EXPIRED:
            log.debug("Key expired before reaping: %s", key)
        if not lookup.found:
            return jsonify(not_found_status(key)), 404
        return jsonify(lookup.value)

    @bp.route("/<key>", methods=["POST"])
    def create(key):
        ttl, ttl_error = parse_ttl(request.args.get("ttl"), settings.default_ttl)
        if ttl_error:
            log.warning("Rejected insert for key=%s: %s", key, ttl_error)
            return jsonify(make_status(ttl_error)), 400

        try:
            value = request.get_json(force=True)
        except BadRequest as e:
            log.warning("Malformed JSON body for key=%s: %s", key, e)
            return jsonify(make_status("Malformed JSON body")), 400

        try:
            datastore.put(key, value, ttl_seconds=ttl)
        except SerializationError as e:
            log.warning("Error serializing JSON for key=%s: %s", key, e)
            return jsonify(make_status("Error Creating Item"))

        log.info("Key inserted: %s (ttl=%s)", key, ttl)
        return jsonify(make_status("inserted", key=key))

    @bp.route("/<key>", methods=["DELETE"])
    def delete(key):
        if datastore.delete(key):
            log.info("Key deleted: %s", key)
            return jsonify(make_status("deleted", key=key))
        return jsonify(make_status("not found", key=key))

    return bp
