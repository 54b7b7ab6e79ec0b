from flask import jsonify


def success_response(data=None, metadata=None, status=200):
    body = {"success": True, "data": data}
    if metadata is not None:
        body["metadata"] = metadata
    return jsonify(body), status


def error_response(error, status):
    """error is the dict produced by ApiError.to_dict()."""
    return jsonify({"success": False, "error": error}), status


def pagination_metadata(page, limit, total):
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "has_next": page * limit < total,
        "has_previous": page > 1,
    }
