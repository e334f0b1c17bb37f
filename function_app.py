import azure.functions as func

from receipt_handler import blueprint as receipt_blueprint

app = func.FunctionApp()

app.register_blueprint(receipt_blueprint)
