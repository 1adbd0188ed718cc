from flask import Blueprint, jsonify

from riddlescape.catalog import CATALOG

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the RiddlEscape server!', 'puzzles': len(CATALOG)})

@main.route('/health')
def health():
    return jsonify({'status': 'ok'})
