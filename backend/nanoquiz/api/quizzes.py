from flask import Blueprint, jsonify, request
from nanoquiz.services.quiz import parse_quiz


quizzes = Blueprint('quizzes', __name__)


@quizzes.route('/validate', methods=['POST'])
def validate_quiz():
    """
    Checks a quiz definition before a host uploads it over the socket.
    Unlike host:createGame, the response names the first offending field.
    """
    result = parse_quiz(request.get_json(silent=True))
    if not result.ok:
        return jsonify({'ok': False, 'error': result.error}), 400
    return jsonify({
        'ok': True,
        'title': result.quiz.title,
        'questionCount': len(result.quiz.questions),
    })
