from flask import Blueprint, current_app, jsonify
from nanoquiz import get_registry

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the NanoQuiz game server!'})

@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'sessions': len(get_registry(current_app))})
