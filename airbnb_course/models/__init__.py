"""
Model utilities package.

Session helpers for supervised and unsupervised learning, plus the nightly
price model. Typical entrypoints are:

- airbnb_course.models.regression.compare_formulas() : OLS formula comparison
- airbnb_course.models.regression.fit_lasso_cv()     : cross-validated LASSO
- airbnb_course.models.classification.fit_tree()     : classification trees
- airbnb_course.models.train.train_price_model()     : train and save the price model
- airbnb_course.models.predict.predict_price()       : predict from the saved model
"""
