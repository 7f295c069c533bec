from feeflow import create_app

app = create_app()


def main():
    # Local development only; production runs the WSGI ``app`` object
    print("\n" + "=" * 50)
    print("Starting local development server...")
    print("Access the API at: http://127.0.0.1:5001/api")
    print("=" * 50 + "\n")
    app.run(host='127.0.0.1', port=5001, debug=app.config.get('DEBUG', False))


if __name__ == '__main__':
    main()
